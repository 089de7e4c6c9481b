"""
Orquestração do lote de adaptação: um material, vários perfis.

O texto é extraído uma única vez e compartilhado. Cada perfil roda de forma
independente; falhas de um perfil viram um resultado de falha e não
interrompem os demais.
"""
import os
import time
import logging
import threading
import traceback
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, dataclass, field
from typing import List, Optional, Sequence, Union

from dotenv import load_dotenv

from adaptador.agent import adapt_for_profile, create_adaptation_agent
from adaptador.documents import extract_text
from adaptador.entities import Material
from adaptador.errors import (
    ExtractionError, MaterialNotFoundError, ProfileInvalidError, ProfileNotFoundError,
    StorageError,
)
from adaptador.rules import missing_fields

load_dotenv()

logger = logging.getLogger(__name__)

# Limite de perfis processados ao mesmo tempo (protege o serviço do modelo)
ADAPTATION_MAX_CONCURRENCY = int(os.getenv("ADAPTATION_MAX_CONCURRENCY", "3"))


@dataclass
class ProfileSuccess:
    profile_id: str
    profile_name: str
    adapted_material_id: str
    generated_file_name: str
    storage_url: str
    passthrough: bool = False


@dataclass
class ProfileFailure:
    profile_id: str
    reason: str
    error_type: str


ProfileOutcome = Union[ProfileSuccess, ProfileFailure]


@dataclass
class BatchResult:
    results: List[ProfileSuccess] = field(default_factory=list)
    failures: List[ProfileFailure] = field(default_factory=list)
    cancelled: bool = False

    @property
    def success_count(self) -> int:
        return len(self.results)

    def to_dict(self):
        return {
            "results": [asdict(r) for r in self.results],
            "success_count": self.success_count,
            "failures": [asdict(f) for f in self.failures],
            "cancelled": self.cancelled,
        }


def load_material_text(material: Material, storage) -> str:
    """Baixa o material original e extrai o texto compartilhado pelo lote."""
    try:
        data = storage.download(material.file_key)
    except StorageError as e:
        raise ExtractionError(f"Não foi possível baixar o material {material.id}: {e}") from e

    return extract_text(data, material.file_type)


def _failure(profile_id, error: Exception) -> ProfileFailure:
    return ProfileFailure(profile_id=str(profile_id), reason=str(error),
                          error_type=type(error).__name__)


def process_profile(profile_id, material: Material, original_text: str, services, agent,
                    cancel_event: Optional[threading.Event] = None) -> ProfileOutcome:
    """Adapta o material para um perfil e devolve o resultado, sucesso ou falha."""
    if cancel_event is not None and cancel_event.is_set():
        logger.warning(f"Lote cancelado; perfil {profile_id} não processado")
        return ProfileFailure(profile_id=str(profile_id), reason="Lote cancelado",
                              error_type="Cancelled")

    try:
        profile = services.profiles.get_by_id(profile_id)
        if profile is None:
            error = ProfileNotFoundError(profile_id)
            logger.warning(f"Perfil ignorado: {error}")
            return _failure(profile_id, error)

        missing = missing_fields(profile)
        if missing:
            error = ProfileInvalidError(profile_id, missing)
            logger.warning(f"Perfil ignorado: {error}")
            return _failure(profile_id, error)

        final_state = adapt_for_profile(agent, material, profile, original_text)
    except Exception as e:
        logger.error(f"Erro ao adaptar material {material.id} para o perfil {profile_id}: {e}")
        logger.error(traceback.format_exc())
        return _failure(profile_id, e)

    adapted = final_state["adapted_material"]
    return ProfileSuccess(
        profile_id=str(profile.id),
        profile_name=profile.profile_name,
        adapted_material_id=str(adapted.id),
        generated_file_name=adapted.adapted_file_name,
        storage_url=adapted.adapted_file_url,
        passthrough=final_state["result"].is_passthrough,
    )


def run_adaptation_batch(material_id, profile_ids: Sequence, services, *,
                         cancel_event: Optional[threading.Event] = None,
                         max_concurrency: Optional[int] = None) -> BatchResult:
    """
    Executa o lote de adaptação.

    Levanta MaterialNotFoundError, ExtractionError ou UnsupportedFormatError
    quando a fase compartilhada falha; qualquer outro erro fica restrito ao
    perfil e aparece em BatchResult.failures. A ordem dos resultados segue a
    ordem de profile_ids.
    """
    profile_ids = list(profile_ids)
    if not profile_ids:
        logger.info("Lote sem perfis; nada a processar")
        return BatchResult()

    material = services.materials.get_by_id(material_id)
    if material is None:
        raise MaterialNotFoundError(material_id)

    started = time.monotonic()
    logger.info(f"Iniciando lote do material {material.id} ({material.file_name}) "
                f"para {len(profile_ids)} perfil(is)")

    original_text = load_material_text(material, services.storage)
    logger.info(f"Texto extraído: {len(original_text)} caracteres")

    agent = create_adaptation_agent(services)
    workers = max(1, min(max_concurrency or ADAPTATION_MAX_CONCURRENCY, len(profile_ids)))

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=f"adaptation-{material.id}") as pool:
        futures = [
            pool.submit(process_profile, profile_id, material, original_text,
                        services, agent, cancel_event)
            for profile_id in profile_ids
        ]
        outcomes = [future.result() for future in futures]

    batch = BatchResult(cancelled=bool(cancel_event is not None and cancel_event.is_set()))
    for outcome in outcomes:
        if isinstance(outcome, ProfileSuccess):
            batch.results.append(outcome)
        else:
            batch.failures.append(outcome)

    elapsed = time.monotonic() - started
    logger.info(f"Lote do material {material.id} concluído em {elapsed:.1f}s: "
                f"{batch.success_count} sucesso(s), {len(batch.failures)} falha(s)")
    return batch
