"""
Grafo de adaptação de um material para um único perfil.

Etapas: regras -> prompt -> modelo -> documento -> storage -> registro.
Qualquer exceção de uma etapa interrompe o grafo e sobe para o orquestrador.
"""
import os
import re
import uuid
import logging
from datetime import datetime
from typing import Any, Dict, List, TypedDict

from langgraph.graph import StateGraph, END

from adaptador.documents import Typography, content_type_for, render_document
from adaptador.entities import AdaptedMaterial, Material, StudentProfile
from adaptador.llm import AdaptationResult
from adaptador.prompt import build_system_prompt
from adaptador.rules import synthesize_rules
from adaptador.storage import StoredObject

logger = logging.getLogger(__name__)


# Definição do estado do grafo
class AdaptationState(TypedDict, total=False):
    material: Material
    profile: StudentProfile
    original_text: str
    rules: List[str]
    system_prompt: str
    result: AdaptationResult
    document: bytes
    file_name: str
    stored: StoredObject
    adapted_material: AdaptedMaterial
    status: str


def adapted_file_name(material: Material, profile: StudentProfile) -> str:
    """Nome do arquivo adaptado: <original>_adaptado_<perfil>.<ext>"""
    stem = os.path.splitext(material.file_name)[0]
    safe_profile = re.sub(r"[^\w\-]+", "_", profile.profile_name).strip("_") or str(profile.id)
    return f"{stem}_adaptado_{safe_profile}.{material.file_type}"


def adapted_file_key(material: Material, profile: StudentProfile, file_name: str) -> str:
    # Chave única por execução: reprocessar nunca sobrescreve o histórico
    stamp = datetime.utcnow().strftime("%Y%m%d%H%M%S%f")
    return (f"adapted/{material.class_id}/{material.id}/{profile.id}/"
            f"{stamp}-{uuid.uuid4().hex[:8]}-{file_name}")


def synthesize(state: AdaptationState) -> Dict[str, Any]:
    rules = synthesize_rules(state["profile"])
    logger.debug(f"{len(rules)} regras sintetizadas para o perfil {state['profile'].profile_name}")
    return {"rules": rules, "status": "rules_synthesized"}


def compose_prompt(state: AdaptationState) -> Dict[str, Any]:
    system_prompt = build_system_prompt(state["rules"], state["profile"].observacoes)
    return {"system_prompt": system_prompt, "status": "prompt_built"}


def adapt_text(state: AdaptationState, llm) -> Dict[str, Any]:
    logger.info(f"Adaptando texto para o perfil {state['profile'].profile_name}...")
    result = llm.adapt(state["system_prompt"], state["original_text"])
    if result.is_passthrough:
        logger.warning(
            f"Perfil {state['profile'].profile_name}: modelo não adaptou o texto ({result.reason})"
        )
    return {"result": result, "status": "text_adapted"}


def render(state: AdaptationState) -> Dict[str, Any]:
    material = state["material"]
    typography = Typography.from_profile(state["profile"])
    document = render_document(state["result"].text, material.file_type, typography)
    return {
        "document": document,
        "file_name": adapted_file_name(material, state["profile"]),
        "status": "rendered",
    }


def store(state: AdaptationState, storage) -> Dict[str, Any]:
    material = state["material"]
    key = adapted_file_key(material, state["profile"], state["file_name"])
    stored = storage.put(key, state["document"], content_type_for(material.file_type))
    return {"stored": stored, "status": "stored"}


def record(state: AdaptationState, adapted_materials) -> Dict[str, Any]:
    stored = state["stored"]
    adapted = adapted_materials.create(AdaptedMaterial(
        material_id=state["material"].id,
        profile_id=state["profile"].id,
        adapted_file_name=state["file_name"],
        adapted_file_url=stored.url,
        adapted_file_key=stored.key,
        adapted_file_size=stored.size,
    ))
    logger.info(f"Material adaptado salvo: {adapted.id}")
    return {"adapted_material": adapted, "status": "recorded"}


def router(state: AdaptationState) -> str:
    """Decide o próximo estado."""
    status_map = {
        "rules_synthesized": "compose_prompt",
        "prompt_built": "adapt_text",
        "text_adapted": "render",
        "rendered": "store",
        "stored": "record",
        "recorded": END,
    }
    next_state = status_map.get(state["status"], END)
    logger.debug(f"Transição de estado: {state['status']} -> {next_state}")
    return next_state


def create_adaptation_agent(services):
    """Cria o grafo de adaptação ligado aos colaboradores informados."""
    workflow = StateGraph(AdaptationState)

    workflow.add_node("synthesize", synthesize)
    workflow.add_node("compose_prompt", compose_prompt)
    workflow.add_node("adapt_text", lambda state: adapt_text(state, services.llm))
    workflow.add_node("render", render)
    workflow.add_node("store", lambda state: store(state, services.storage))
    workflow.add_node("record", lambda state: record(state, services.adapted_materials))

    workflow.set_entry_point("synthesize")

    for node in ("synthesize", "compose_prompt", "adapt_text", "render", "store", "record"):
        workflow.add_conditional_edges(node, router)

    return workflow.compile()


def adapt_for_profile(agent, material: Material, profile: StudentProfile,
                      original_text: str) -> AdaptationState:
    """Executa o grafo e devolve o estado final."""
    initial_state = AdaptationState(
        material=material,
        profile=profile,
        original_text=original_text,
        status="start",
    )
    return agent.invoke(initial_state)
