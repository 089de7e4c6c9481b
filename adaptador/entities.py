"""
Entidades do domínio.
Dataclasses puras, sem dependência de banco de dados.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class Turma:
    """Turma do professor; agrupa perfis e materiais."""
    user_id: str
    name: str
    description: Optional[str] = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class StudentProfile:
    """
    Perfil anônimo de acessibilidade.

    As cinco dimensões ficam como texto cru para que um perfil incompleto
    ainda possa ser exibido; a validação acontece antes da adaptação.
    """
    class_id: uuid.UUID
    profile_name: str
    fragmentacao: Optional[str] = None    # baixa | media | alta
    abstracao: Optional[str] = None       # alta | media | baixa | nao_abstrai
    mediacao: Optional[str] = None        # autonomo | guiado | passo_a_passo
    dislexia: Optional[str] = None        # sim | nao
    tipo_letra: Optional[str] = None      # bastao | normal
    observacoes: Optional[str] = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class Material:
    """Documento original enviado pelo professor. Imutável após criado."""
    class_id: uuid.UUID
    file_name: str
    file_type: str                        # pdf | docx
    file_url: str
    file_key: str
    file_size: Optional[int] = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    uploaded_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class AdaptedMaterial:
    """Resultado de uma adaptação (material, perfil). Histórico só cresce."""
    material_id: uuid.UUID
    profile_id: uuid.UUID
    adapted_file_name: str
    adapted_file_url: str
    adapted_file_key: str
    adapted_file_size: Optional[int] = None
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    adapted_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self):
        """Converte a entidade para dicionário."""
        return {
            "id": str(self.id),
            "material_id": str(self.material_id),
            "profile_id": str(self.profile_id),
            "adapted_file_name": self.adapted_file_name,
            "adapted_file_url": self.adapted_file_url,
            "adapted_file_size": self.adapted_file_size,
            "adapted_at": self.adapted_at.isoformat() + "Z" if self.adapted_at else None,
        }
