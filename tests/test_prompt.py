from adaptador.prompt import (
    NOTES_HEADER, USER_MESSAGE_LABEL, build_messages, build_system_prompt, build_user_message
)

RULES = ["Explicação passo a passo.", "Linguagem direta e literal."]


def test_system_prompt_has_framing_invariant_and_rules():
    prompt = build_system_prompt(RULES)

    assert "especialista em educação inclusiva" in prompt
    assert "Nunca remova informações ou altere o significado" in prompt
    assert "- Explicação passo a passo.\n- Linguagem direta e literal." in prompt
    assert NOTES_HEADER not in prompt


def test_notes_block_only_when_notes_present():
    assert NOTES_HEADER not in build_system_prompt(RULES, "   ")

    prompt = build_system_prompt(RULES, "Gosta de exemplos com animais")
    assert f"{NOTES_HEADER}\n<<<\nGosta de exemplos com animais\n>>>" in prompt
    assert prompt.index("Linguagem direta") < prompt.index(NOTES_HEADER)


def test_user_message_keeps_original_text_verbatim():
    original = "Intro.\n\n  Body text here.  \n"
    message = build_user_message(original)

    assert message.startswith(USER_MESSAGE_LABEL)
    assert message.endswith(original)


def test_messages_are_system_then_user():
    messages = build_messages("sistema", "texto")
    assert [m["role"] for m in messages] == ["system", "user"]
    assert messages[0]["content"] == "sistema"
    assert messages[1]["content"] == build_user_message("texto")
