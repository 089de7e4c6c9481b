"""
Repositórios tipados por entidade.

Cada porta expõe apenas as consultas que o adaptador usa (por id e por pai).
Há duas implementações: SQLAlchemy, que abre uma sessão por operação e pode
ser compartilhada entre threads, e memória, para desenvolvimento local.
"""
import logging
import threading
import uuid
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Protocol

from sqlalchemy.orm import Session

from adaptador.db_models import (
    AdaptedMaterialRecord, MaterialRecord, StudentProfileRecord, TurmaRecord
)
from adaptador.entities import AdaptedMaterial, Material, StudentProfile, Turma

logger = logging.getLogger(__name__)


class ClassRepository(Protocol):
    def create(self, turma: Turma) -> Turma: ...

    def get_by_id(self, class_id: uuid.UUID) -> Optional[Turma]: ...


class ProfileRepository(Protocol):
    def create(self, profile: StudentProfile) -> StudentProfile: ...

    def get_by_id(self, profile_id: uuid.UUID) -> Optional[StudentProfile]: ...

    def list_by_class(self, class_id: uuid.UUID) -> List[StudentProfile]: ...


class MaterialRepository(Protocol):
    def create(self, material: Material) -> Material: ...

    def get_by_id(self, material_id: uuid.UUID) -> Optional[Material]: ...

    def list_by_class(self, class_id: uuid.UUID) -> List[Material]: ...


class AdaptedMaterialRepository(Protocol):
    def create(self, adapted: AdaptedMaterial) -> AdaptedMaterial: ...

    def get_by_id(self, adapted_material_id: uuid.UUID) -> Optional[AdaptedMaterial]: ...

    def list_by_material(self, material_id: uuid.UUID) -> List[AdaptedMaterial]: ...

    def list_by_profile(self, profile_id: uuid.UUID) -> List[AdaptedMaterial]: ...


# ===== CONVERSÕES ORM <-> ENTIDADE =====

def _turma_from_record(r: TurmaRecord) -> Turma:
    return Turma(id=r.id, user_id=r.user_id, name=r.name,
                 description=r.description, created_at=r.created_at)


def _profile_from_record(r: StudentProfileRecord) -> StudentProfile:
    return StudentProfile(
        id=r.id, class_id=r.class_id, profile_name=r.profile_name,
        fragmentacao=r.fragmentacao, abstracao=r.abstracao, mediacao=r.mediacao,
        dislexia=r.dislexia, tipo_letra=r.tipo_letra, observacoes=r.observacoes,
        created_at=r.created_at,
    )


def _material_from_record(r: MaterialRecord) -> Material:
    return Material(
        id=r.id, class_id=r.class_id, file_name=r.file_name, file_type=r.file_type,
        file_url=r.file_url, file_key=r.file_key, file_size=r.file_size,
        uploaded_at=r.uploaded_at,
    )


def _adapted_from_record(r: AdaptedMaterialRecord) -> AdaptedMaterial:
    return AdaptedMaterial(
        id=r.id, material_id=r.material_id, profile_id=r.profile_id,
        adapted_file_name=r.adapted_file_name, adapted_file_url=r.adapted_file_url,
        adapted_file_key=r.adapted_file_key, adapted_file_size=r.adapted_file_size,
        adapted_at=r.adapted_at,
    )


# ===== SQLALCHEMY =====

class _SqlRepository:
    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def _insert(self, record, converter):
        db = self.session_factory()
        try:
            db.add(record)
            db.commit()
            db.refresh(record)
            return converter(record)
        except Exception as e:
            db.rollback()
            logger.error(f"Falha ao inserir {record.__tablename__}: {e}")
            raise
        finally:
            db.close()

    def _first(self, model, converter, *criteria):
        db = self.session_factory()
        try:
            record = db.query(model).filter(*criteria).first()
            return converter(record) if record else None
        finally:
            db.close()

    def _all(self, model, converter, order_by, *criteria):
        db = self.session_factory()
        try:
            records = db.query(model).filter(*criteria).order_by(order_by).all()
            return [converter(r) for r in records]
        finally:
            db.close()


class SqlClassRepository(_SqlRepository):
    def create(self, turma: Turma) -> Turma:
        return self._insert(TurmaRecord(
            id=turma.id, user_id=turma.user_id, name=turma.name,
            description=turma.description, created_at=turma.created_at,
        ), _turma_from_record)

    def get_by_id(self, class_id: uuid.UUID) -> Optional[Turma]:
        return self._first(TurmaRecord, _turma_from_record, TurmaRecord.id == class_id)


class SqlProfileRepository(_SqlRepository):
    def create(self, profile: StudentProfile) -> StudentProfile:
        return self._insert(StudentProfileRecord(
            id=profile.id, class_id=profile.class_id, profile_name=profile.profile_name,
            fragmentacao=profile.fragmentacao, abstracao=profile.abstracao,
            mediacao=profile.mediacao, dislexia=profile.dislexia,
            tipo_letra=profile.tipo_letra, observacoes=profile.observacoes,
            created_at=profile.created_at,
        ), _profile_from_record)

    def get_by_id(self, profile_id: uuid.UUID) -> Optional[StudentProfile]:
        return self._first(StudentProfileRecord, _profile_from_record,
                           StudentProfileRecord.id == profile_id)

    def list_by_class(self, class_id: uuid.UUID) -> List[StudentProfile]:
        return self._all(StudentProfileRecord, _profile_from_record,
                         StudentProfileRecord.created_at,
                         StudentProfileRecord.class_id == class_id)


class SqlMaterialRepository(_SqlRepository):
    def create(self, material: Material) -> Material:
        return self._insert(MaterialRecord(
            id=material.id, class_id=material.class_id, file_name=material.file_name,
            file_type=material.file_type, file_url=material.file_url,
            file_key=material.file_key, file_size=material.file_size,
            uploaded_at=material.uploaded_at,
        ), _material_from_record)

    def get_by_id(self, material_id: uuid.UUID) -> Optional[Material]:
        return self._first(MaterialRecord, _material_from_record, MaterialRecord.id == material_id)

    def list_by_class(self, class_id: uuid.UUID) -> List[Material]:
        return self._all(MaterialRecord, _material_from_record,
                         MaterialRecord.uploaded_at.desc(),
                         MaterialRecord.class_id == class_id)


class SqlAdaptedMaterialRepository(_SqlRepository):
    def create(self, adapted: AdaptedMaterial) -> AdaptedMaterial:
        return self._insert(AdaptedMaterialRecord(
            id=adapted.id, material_id=adapted.material_id, profile_id=adapted.profile_id,
            adapted_file_name=adapted.adapted_file_name,
            adapted_file_url=adapted.adapted_file_url,
            adapted_file_key=adapted.adapted_file_key,
            adapted_file_size=adapted.adapted_file_size,
            adapted_at=adapted.adapted_at,
        ), _adapted_from_record)

    def get_by_id(self, adapted_material_id: uuid.UUID) -> Optional[AdaptedMaterial]:
        return self._first(AdaptedMaterialRecord, _adapted_from_record,
                           AdaptedMaterialRecord.id == adapted_material_id)

    def list_by_material(self, material_id: uuid.UUID) -> List[AdaptedMaterial]:
        return self._all(AdaptedMaterialRecord, _adapted_from_record,
                         AdaptedMaterialRecord.adapted_at.desc(),
                         AdaptedMaterialRecord.material_id == material_id)

    def list_by_profile(self, profile_id: uuid.UUID) -> List[AdaptedMaterial]:
        return self._all(AdaptedMaterialRecord, _adapted_from_record,
                         AdaptedMaterialRecord.adapted_at.desc(),
                         AdaptedMaterialRecord.profile_id == profile_id)


# ===== MEMÓRIA =====

class _MemoryRepository:
    def __init__(self):
        self._rows: Dict[uuid.UUID, object] = {}
        self._lock = threading.Lock()

    def _insert(self, entity):
        with self._lock:
            self._rows[entity.id] = replace(entity)
            return replace(entity)

    def _get(self, entity_id):
        with self._lock:
            entity = self._rows.get(entity_id)
            return replace(entity) if entity else None

    def _filter(self, predicate, sort_key, reverse=False):
        with self._lock:
            rows = [replace(e) for e in self._rows.values() if predicate(e)]
        return sorted(rows, key=sort_key, reverse=reverse)


class MemoryClassRepository(_MemoryRepository):
    def create(self, turma: Turma) -> Turma:
        return self._insert(turma)

    def get_by_id(self, class_id: uuid.UUID) -> Optional[Turma]:
        return self._get(class_id)


class MemoryProfileRepository(_MemoryRepository):
    def create(self, profile: StudentProfile) -> StudentProfile:
        return self._insert(profile)

    def get_by_id(self, profile_id: uuid.UUID) -> Optional[StudentProfile]:
        return self._get(profile_id)

    def list_by_class(self, class_id: uuid.UUID) -> List[StudentProfile]:
        return self._filter(lambda p: p.class_id == class_id, lambda p: p.created_at)


class MemoryMaterialRepository(_MemoryRepository):
    def create(self, material: Material) -> Material:
        return self._insert(material)

    def get_by_id(self, material_id: uuid.UUID) -> Optional[Material]:
        return self._get(material_id)

    def list_by_class(self, class_id: uuid.UUID) -> List[Material]:
        return self._filter(lambda m: m.class_id == class_id, lambda m: m.uploaded_at, reverse=True)


class MemoryAdaptedMaterialRepository(_MemoryRepository):
    def create(self, adapted: AdaptedMaterial) -> AdaptedMaterial:
        return self._insert(adapted)

    def get_by_id(self, adapted_material_id: uuid.UUID) -> Optional[AdaptedMaterial]:
        return self._get(adapted_material_id)

    def list_by_material(self, material_id: uuid.UUID) -> List[AdaptedMaterial]:
        return self._filter(lambda a: a.material_id == material_id,
                            lambda a: a.adapted_at, reverse=True)

    def list_by_profile(self, profile_id: uuid.UUID) -> List[AdaptedMaterial]:
        return self._filter(lambda a: a.profile_id == profile_id,
                            lambda a: a.adapted_at, reverse=True)

    def __len__(self):
        return len(self._rows)
