"""
Síntese das regras de adaptação a partir do perfil do aluno.
Funções puras: nenhuma chamada externa, mesmo perfil gera sempre a mesma lista.
"""
from enum import Enum
from typing import Dict, List, Tuple

from adaptador.entities import StudentProfile
from adaptador.errors import ProfileInvalidError


class Fragmentacao(str, Enum):
    BAIXA = "baixa"
    MEDIA = "media"
    ALTA = "alta"


class Abstracao(str, Enum):
    ALTA = "alta"
    MEDIA = "media"
    BAIXA = "baixa"
    NAO_ABSTRAI = "nao_abstrai"


class Mediacao(str, Enum):
    AUTONOMO = "autonomo"
    GUIADO = "guiado"
    PASSO_A_PASSO = "passo_a_passo"


class Dislexia(str, Enum):
    SIM = "sim"
    NAO = "nao"


class TipoLetra(str, Enum):
    BASTAO = "bastao"
    NORMAL = "normal"


# Campos obrigatórios, na ordem em que as regras são emitidas
REQUIRED_FIELDS = ("fragmentacao", "abstracao", "mediacao", "dislexia", "tipo_letra")

FRAGMENTACAO_RULES: Dict[Fragmentacao, List[str]] = {
    Fragmentacao.BAIXA: [
        "Mantenha o texto em estrutura contínua com parágrafos naturais.",
    ],
    Fragmentacao.MEDIA: [
        "Divida o conteúdo em parágrafos curtos (3-5 linhas). Cada parágrafo deve abordar um conceito específico.",
        "Adicione títulos e subtítulos para organizar o conteúdo.",
    ],
    Fragmentacao.ALTA: [
        "Divida cada conceito em um bloco separado.",
        "Use listas numeradas ou com marcadores extensivamente.",
        "Máximo de 2-3 linhas por bloco.",
        "Cada seção deve ter um título descritivo.",
    ],
}

ABSTRACAO_RULES: Dict[Abstracao, List[str]] = {
    Abstracao.ALTA: [
        "Inclua analogias contextualizadas e exemplos práticos avançados.",
        "Permita inferências e pensamento abstrato.",
    ],
    Abstracao.MEDIA: [
        "Explique conceitos com exemplos simples e diretos.",
        "Mantenha algum nível de abstração, mas com clareza.",
    ],
    Abstracao.BAIXA: [
        "Explicação passo a passo.",
        "Linguagem direta e literal.",
        "Sem inferências implícitas.",
        "Cada conceito deve ser explicitado.",
    ],
    Abstracao.NAO_ABSTRAI: [
        "Mantenha tudo literal e factual.",
        "Sem analogias, metáforas ou interpretações subjetivas.",
        "Apenas fatos e definições.",
    ],
}

MEDIACAO_RULES: Dict[Mediacao, List[str]] = {
    Mediacao.AUTONOMO: [
        "O material deve ser autoexplicativo.",
        "Não inclua instruções adicionais ou perguntas de verificação.",
    ],
    Mediacao.GUIADO: [
        "Inclua instruções curtas (ex: 'Leia o parágrafo abaixo').",
        "Adicione exemplos que orientem o aluno.",
        "Sem excesso de detalhes.",
    ],
    Mediacao.PASSO_A_PASSO: [
        "Explique cada etapa em detalhe.",
        "Após cada conceito, inclua uma pergunta de checagem (ex: 'Você entendeu que...?').",
        "Adicione resumos do que foi aprendido.",
    ],
}

DISLEXIA_RULES: Dict[Dislexia, List[str]] = {
    Dislexia.SIM: [
        "Use fontes legíveis: Arial, Verdana ou OpenDyslexic.",
        "Espaçamento entre linhas: 1.5 ou superior.",
        "Frases curtas: máximo 15 palavras por frase.",
        "Cores neutras: preto sobre branco ou azul claro.",
        "Alto contraste entre texto e fundo.",
        "Evite blocos de texto muito densos.",
    ],
    Dislexia.NAO: [],
}

TIPO_LETRA_RULES: Dict[TipoLetra, List[str]] = {
    TipoLetra.BASTAO: [
        "Use fonte de letra bastão (sem serifas) em todo o material. Exemplos: Arial, Verdana, Helvetica.",
    ],
    TipoLetra.NORMAL: [],
}


def missing_fields(profile: StudentProfile) -> List[str]:
    """Lista as dimensões obrigatórias ausentes ou vazias do perfil."""
    return [name for name in REQUIRED_FIELDS if not getattr(profile, name, None)]


def validate_profile(profile: StudentProfile) -> bool:
    """Um perfil é válido para adaptação se as cinco dimensões estão preenchidas."""
    return not missing_fields(profile)


def require_valid_profile(profile: StudentProfile) -> StudentProfile:
    missing = missing_fields(profile)
    if missing:
        raise ProfileInvalidError(profile.id, missing)
    return profile


def synthesize_rule_groups(profile: StudentProfile) -> List[Tuple[str, List[str]]]:
    """
    Retorna as regras agrupadas por dimensão, na ordem fixa:
    fragmentação, abstração, mediação, dislexia e tipo de letra.

    Valores fora das enumerações levantam ValueError.
    """
    return [
        ("fragmentacao", list(FRAGMENTACAO_RULES[Fragmentacao(profile.fragmentacao)])),
        ("abstracao", list(ABSTRACAO_RULES[Abstracao(profile.abstracao)])),
        ("mediacao", list(MEDIACAO_RULES[Mediacao(profile.mediacao)])),
        ("dislexia", list(DISLEXIA_RULES[Dislexia(profile.dislexia)])),
        ("tipo_letra", list(TIPO_LETRA_RULES[TipoLetra(profile.tipo_letra)])),
    ]


def synthesize_rules(profile: StudentProfile) -> List[str]:
    """Lista ordenada de diretrizes de adaptação para o perfil."""
    rules: List[str] = []
    for _, group in synthesize_rule_groups(profile):
        rules.extend(group)
    return rules
