"""
Cliente do modelo de linguagem usado para reescrever o material.
Suporta Gemini API e Vertex AI, escolhidos pela variável USE_VERTEXAI.
"""
import os
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from dotenv import load_dotenv

from adaptador.entities import StudentProfile
from adaptador.errors import LLMInvocationError, LLMResponseFormatError
from adaptador.prompt import build_messages, build_system_prompt
from adaptador.rules import require_valid_profile, synthesize_rules

load_dotenv()

logger = logging.getLogger(__name__)

USE_VERTEXAI = os.getenv("USE_VERTEXAI", "false").lower() == "true"
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "120"))


@dataclass(frozen=True)
class Adapted:
    """Texto reescrito pelo modelo."""
    text: str
    is_passthrough = False


@dataclass(frozen=True)
class PassthroughFallback:
    """O modelo respondeu sem texto; o original segue sem adaptação."""
    text: str
    reason: str
    is_passthrough = True


AdaptationResult = Union[Adapted, PassthroughFallback]


def init_gemini_model(system_prompt: str):
    """Inicializa o modelo via Gemini API."""
    import google.generativeai as genai

    genai.configure(api_key=os.getenv("GEMINI_API_KEY"))
    return genai.GenerativeModel(GEMINI_MODEL, system_instruction=system_prompt)


def init_vertex_model(system_prompt: str):
    """Inicializa o modelo no Vertex AI usando credenciais do ambiente."""
    import vertexai
    from vertexai.generative_models import GenerativeModel

    project_id = os.getenv("GOOGLE_CLOUD_PROJECT")
    location = os.getenv("GOOGLE_CLOUD_LOCATION", "us-central1")

    if not project_id:
        raise ValueError("A variável de ambiente GOOGLE_CLOUD_PROJECT não foi definida.")

    vertexai.init(project=project_id, location=location)
    return GenerativeModel(GEMINI_MODEL, system_instruction=system_prompt)


def get_model_factory() -> Callable[[str], Any]:
    """Retorna a fábrica de modelos conforme a variável USE_VERTEXAI."""
    if USE_VERTEXAI:
        logger.info("Usando Vertex AI como backend")
        return init_vertex_model
    logger.info("Usando Gemini API como backend")
    return init_gemini_model


def _response_text(response) -> Optional[str]:
    """
    Extrai o texto do primeiro candidato.

    Retorna None quando o candidato existe mas não traz texto.
    """
    if response is None:
        raise LLMResponseFormatError("Resposta vazia do modelo")

    candidates = getattr(response, "candidates", None)
    if not candidates:
        raise LLMResponseFormatError("Resposta do modelo sem candidatos")

    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []

    texts: List[str] = []
    for part in parts:
        text = getattr(part, "text", None)
        if text is None:
            continue
        if not isinstance(text, str):
            raise LLMResponseFormatError(
                f"Formato inesperado na resposta do modelo: {type(text).__name__}"
            )
        texts.append(text)

    joined = "".join(texts)
    return joined if joined.strip() else None


class LLMAdapterClient:
    """
    Envia uma requisição (sistema + usuário) e devolve o texto adaptado.
    Não há nova tentativa: erros sobem para quem chamou.
    """

    def __init__(self, model_factory: Optional[Callable[[str], Any]] = None,
                 timeout: Optional[float] = None):
        self.model_factory = model_factory or get_model_factory()
        self.timeout = timeout if timeout is not None else LLM_TIMEOUT_SECONDS
        # O SDK do Vertex AI não aceita request_options; o timeout vale só para a Gemini API
        self.enforces_timeout = self.model_factory is not init_vertex_model
        if not self.enforces_timeout:
            logger.info("Vertex AI: timeout da chamada definido pelo SDK, LLM_TIMEOUT_SECONDS ignorado")

    def _generate(self, messages: List[Dict[str, str]]):
        system_prompt = messages[0]["content"]
        user_content = messages[1]["content"]
        model = self.model_factory(system_prompt)
        if not self.enforces_timeout:
            return model.generate_content(user_content)
        return model.generate_content(user_content, request_options={"timeout": self.timeout})

    def adapt(self, system_prompt: str, user_text: str) -> AdaptationResult:
        messages = build_messages(system_prompt, user_text)

        try:
            response = self._generate(messages)
        except Exception as e:
            logger.error(f"Erro na chamada ao modelo: {e}")
            raise LLMInvocationError(f"Falha na chamada ao modelo: {e}") from e

        text = _response_text(response)
        if text is None:
            candidate = response.candidates[0]
            reason = f"resposta sem texto (finish_reason={getattr(candidate, 'finish_reason', None)})"
            logger.warning(f"Modelo respondeu sem texto; usando o material original: {reason}")
            return PassthroughFallback(text=user_text, reason=reason)

        logger.debug(f"Texto adaptado recebido ({len(text)} caracteres)")
        return Adapted(text=text)


def adapt_text_content(original_text: str, profile: StudentProfile,
                       client: LLMAdapterClient) -> AdaptationResult:
    """Adapta um texto avulso para o perfil informado."""
    require_valid_profile(profile)
    rules = synthesize_rules(profile)
    system_prompt = build_system_prompt(rules, profile.observacoes)
    return client.adapt(system_prompt, original_text)
