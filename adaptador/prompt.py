"""
Montagem do prompt enviado ao modelo.
"""
from typing import Dict, List, Optional, Sequence

USER_MESSAGE_LABEL = "Material original:"

SYSTEM_PREAMBLE = """Você é um especialista em educação inclusiva e adaptação de materiais didáticos.

Seu objetivo é adaptar o material didático abaixo conforme o perfil específico do aluno, mantendo TODAS as informações do original.

IMPORTANTE: Adapte apenas linguagem, estrutura, clareza e acessibilidade. Nunca remova informações ou altere o significado do conteúdo."""

NOTES_HEADER = "Observações adicionais do professor:"


def build_system_prompt(rules: Sequence[str], notes: Optional[str] = None) -> str:
    """
    Compõe o prompt de sistema com o preâmbulo fixo, as regras do perfil
    e, se houver, as observações do professor em bloco separado.
    """
    rules_text = "\n".join(f"- {rule}" for rule in rules)
    prompt = f"{SYSTEM_PREAMBLE}\n\nRegras de adaptação:\n{rules_text}\n"

    if notes and notes.strip():
        prompt += f"\n{NOTES_HEADER}\n<<<\n{notes}\n>>>\n"

    prompt += "\nGere o material adaptado completo:"
    return prompt


def build_user_message(original_text: str) -> str:
    # O texto original segue sem nenhuma alteração
    return f"{USER_MESSAGE_LABEL}\n\n{original_text}"


def build_messages(system_prompt: str, original_text: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": build_user_message(original_text)},
    ]
