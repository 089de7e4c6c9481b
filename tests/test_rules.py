import itertools

import pytest

from adaptador.errors import ProfileInvalidError
from adaptador.rules import (
    ABSTRACAO_RULES, DISLEXIA_RULES, FRAGMENTACAO_RULES, MEDIACAO_RULES, TIPO_LETRA_RULES,
    Abstracao, Dislexia, Fragmentacao, Mediacao, TipoLetra, REQUIRED_FIELDS,
    require_valid_profile, synthesize_rule_groups, synthesize_rules, validate_profile,
)
from tests.conftest import make_profile

ALL_COMBINATIONS = list(itertools.product(
    [v.value for v in Fragmentacao],
    [v.value for v in Abstracao],
    [v.value for v in Mediacao],
    [v.value for v in Dislexia],
    [v.value for v in TipoLetra],
))


def _profile(combo, **extra):
    fragmentacao, abstracao, mediacao, dislexia, tipo_letra = combo
    return make_profile(fragmentacao=fragmentacao, abstracao=abstracao, mediacao=mediacao,
                        dislexia=dislexia, tipo_letra=tipo_letra, **extra)


def test_complete_profile_is_valid():
    assert validate_profile(make_profile(observacoes="Gosta de exemplos com animais"))


@pytest.mark.parametrize("field", REQUIRED_FIELDS)
@pytest.mark.parametrize("empty", [None, ""])
def test_profile_missing_any_field_is_invalid(field, empty):
    profile = make_profile(**{field: empty})
    assert not validate_profile(profile)
    with pytest.raises(ProfileInvalidError) as exc:
        require_valid_profile(profile)
    assert exc.value.missing_fields == [field]


def test_every_combination_is_valid():
    assert len(ALL_COMBINATIONS) == 144
    assert all(validate_profile(_profile(combo)) for combo in ALL_COMBINATIONS)


def test_synthesize_is_deterministic_for_all_combinations():
    for combo in ALL_COMBINATIONS:
        first = synthesize_rules(_profile(combo))
        second = synthesize_rules(_profile(combo, profile_name="Outro"))
        assert first == second
        assert first


def test_rules_follow_fixed_dimension_order():
    profile = make_profile(fragmentacao="alta", abstracao="nao_abstrai", mediacao="guiado",
                           dislexia="sim", tipo_letra="bastao")

    groups = synthesize_rule_groups(profile)

    assert [name for name, _ in groups] == list(REQUIRED_FIELDS)
    assert synthesize_rules(profile) == (
        FRAGMENTACAO_RULES[Fragmentacao.ALTA]
        + ABSTRACAO_RULES[Abstracao.NAO_ABSTRAI]
        + MEDIACAO_RULES[Mediacao.GUIADO]
        + DISLEXIA_RULES[Dislexia.SIM]
        + TIPO_LETRA_RULES[TipoLetra.BASTAO]
    )


def test_every_enum_value_of_the_content_dimensions_emits_a_directive():
    for table in (FRAGMENTACAO_RULES, ABSTRACAO_RULES, MEDIACAO_RULES):
        assert all(table[value] for value in table)


def test_dyslexia_bundle_is_the_only_difference():
    bundle = DISLEXIA_RULES[Dislexia.SIM]
    for combo in ALL_COMBINATIONS:
        if combo[3] != "sim":
            continue
        with_bundle = synthesize_rules(_profile(combo))
        without_bundle = synthesize_rules(_profile(combo[:3] + ("nao",) + combo[4:]))

        assert all(rule in with_bundle for rule in bundle)
        assert not any(rule in without_bundle for rule in bundle)
        assert [r for r in with_bundle if r not in bundle] == without_bundle


def test_normal_letter_style_adds_nothing():
    bastao = synthesize_rules(make_profile(tipo_letra="bastao"))
    normal = synthesize_rules(make_profile(tipo_letra="normal"))
    assert bastao[:-1] == normal
    assert "sem serifas" in bastao[-1]


def test_unknown_enum_value_is_a_programming_error():
    with pytest.raises(ValueError):
        synthesize_rules(make_profile(fragmentacao="extrema"))
