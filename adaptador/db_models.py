"""
Modelos do banco de dados para turmas, perfis e materiais.
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, Text, ForeignKey, Enum, Uuid
from adaptador.database import Base


class TurmaRecord(Base):
    __tablename__ = "turmas"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(255), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class StudentProfileRecord(Base):
    """
    Perfil anônimo de acessibilidade de um aluno.
    """
    __tablename__ = "student_profiles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    class_id = Column(Uuid, ForeignKey("turmas.id"), nullable=False, index=True)
    profile_name = Column(String(100), nullable=False)

    fragmentacao = Column(Enum("baixa", "media", "alta", name="fragmentacao"), nullable=False)
    abstracao = Column(Enum("alta", "media", "baixa", "nao_abstrai", name="abstracao"), nullable=False)
    mediacao = Column(Enum("autonomo", "guiado", "passo_a_passo", name="mediacao"), nullable=False)
    dislexia = Column(Enum("sim", "nao", name="dislexia"), nullable=False)
    tipo_letra = Column(Enum("bastao", "normal", name="tipo_letra"), nullable=False)
    observacoes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class MaterialRecord(Base):
    """
    Documento original enviado pelo professor.
    """
    __tablename__ = "materials"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    class_id = Column(Uuid, ForeignKey("turmas.id"), nullable=False, index=True)
    file_name = Column(String(255), nullable=False)
    file_type = Column(Enum("pdf", "docx", name="file_type"), nullable=False)
    file_url = Column(String(1000), nullable=False)
    file_key = Column(String(512), nullable=False)
    file_size = Column(Integer, nullable=True)
    uploaded_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class AdaptedMaterialRecord(Base):
    """
    Material adaptado para um perfil. Uma linha nova a cada adaptação.
    """
    __tablename__ = "adapted_materials"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # Sem cascade: o histórico sobrevive à remoção do material
    material_id = Column(Uuid, ForeignKey("materials.id"), nullable=False, index=True)
    profile_id = Column(Uuid, ForeignKey("student_profiles.id"), nullable=False, index=True)
    adapted_file_name = Column(String(255), nullable=False)
    adapted_file_url = Column(String(1000), nullable=False)
    adapted_file_key = Column(String(512), nullable=False)
    adapted_file_size = Column(Integer, nullable=True)
    adapted_at = Column(DateTime, default=datetime.utcnow, nullable=False)
