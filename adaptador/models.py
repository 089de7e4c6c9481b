from pydantic import BaseModel, Field
from typing import Optional, List
from uuid import UUID


class ProcessMaterialRequest(BaseModel):
    profile_ids: List[UUID] = Field(..., description="Perfis para os quais o material será adaptado")


class AdaptedResult(BaseModel):
    profile_id: str
    profile_name: str
    adapted_material_id: str
    generated_file_name: str
    storage_url: str
    passthrough: bool = Field(False, description="True quando o modelo não adaptou e o texto original foi usado")


class ProfileFailureResponse(BaseModel):
    profile_id: str
    reason: str
    error_type: str


class ProcessMaterialResponse(BaseModel):
    """Resultado do processamento de um material para vários perfis."""
    success: bool
    results: List[AdaptedResult]
    success_count: int
    failures: List[ProfileFailureResponse] = []
    message: str


class AdaptedMaterialResponse(BaseModel):
    """Modelo de resposta para um material adaptado."""
    id: str
    material_id: str
    profile_id: str
    adapted_file_name: str
    adapted_file_url: str
    adapted_file_size: Optional[int] = None
    adapted_at: str
    download_url: Optional[str] = None


class AdaptedMaterialsListResponse(BaseModel):
    adapted_materials: List[AdaptedMaterialResponse]
    total: int


class AdaptTextRequest(BaseModel):
    """Request para adaptar um texto avulso."""
    profile_id: UUID
    text: str = Field(..., description="Texto a ser adaptado", min_length=1)


class AdaptTextResponse(BaseModel):
    adapted_text: str
    passthrough: bool
