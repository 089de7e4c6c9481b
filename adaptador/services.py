"""
Montagem dos colaboradores do adaptador (repositórios, storage e modelo).
A escolha entre backends persistentes e em memória acontece uma única vez,
na inicialização do processo.
"""
import os
import logging
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from adaptador.llm import LLMAdapterClient
from adaptador.repositories import (
    AdaptedMaterialRepository, ClassRepository, MaterialRepository, ProfileRepository,
    MemoryAdaptedMaterialRepository, MemoryClassRepository, MemoryMaterialRepository,
    MemoryProfileRepository, SqlAdaptedMaterialRepository, SqlClassRepository,
    SqlMaterialRepository, SqlProfileRepository,
)
from adaptador.storage import GCSStorage, InMemoryStorage, ObjectStorage

load_dotenv()

logger = logging.getLogger(__name__)

# Roda sem banco e sem bucket (desenvolvimento local)
USE_MEMORY_STORE = os.getenv("USE_MEMORY_STORE", "false").lower() == "true"


@dataclass
class AdaptationServices:
    classes: ClassRepository
    profiles: ProfileRepository
    materials: MaterialRepository
    adapted_materials: AdaptedMaterialRepository
    storage: ObjectStorage
    llm: LLMAdapterClient


def build_memory_services(llm: Optional[LLMAdapterClient] = None,
                          storage: Optional[ObjectStorage] = None) -> AdaptationServices:
    logger.info("Usando repositórios e storage em memória")
    return AdaptationServices(
        classes=MemoryClassRepository(),
        profiles=MemoryProfileRepository(),
        materials=MemoryMaterialRepository(),
        adapted_materials=MemoryAdaptedMaterialRepository(),
        storage=storage or InMemoryStorage(),
        llm=llm or LLMAdapterClient(),
    )


def build_sql_services(session_factory=None, storage: Optional[ObjectStorage] = None,
                       llm: Optional[LLMAdapterClient] = None) -> AdaptationServices:
    from adaptador.database import get_session_factory

    session_factory = session_factory or get_session_factory()
    logger.info("Usando repositórios SQLAlchemy")
    return AdaptationServices(
        classes=SqlClassRepository(session_factory),
        profiles=SqlProfileRepository(session_factory),
        materials=SqlMaterialRepository(session_factory),
        adapted_materials=SqlAdaptedMaterialRepository(session_factory),
        storage=storage or GCSStorage(),
        llm=llm or LLMAdapterClient(),
    )


def build_services() -> AdaptationServices:
    """Escolhe os backends conforme a variável USE_MEMORY_STORE."""
    if USE_MEMORY_STORE:
        return build_memory_services()
    return build_sql_services()
