"""
Exceções do pipeline de adaptação de materiais.

Erros da fase compartilhada (material e extração) abortam o lote inteiro.
Os demais ficam restritos ao perfil que os levantou.
"""
from typing import Iterable, Optional


class AdaptationError(Exception):
    """Base para todos os erros do adaptador."""


class MaterialNotFoundError(AdaptationError):
    def __init__(self, material_id):
        super().__init__(f"Material '{material_id}' não encontrado")
        self.material_id = material_id


class ProfileNotFoundError(AdaptationError):
    def __init__(self, profile_id):
        super().__init__(f"Perfil '{profile_id}' não encontrado")
        self.profile_id = profile_id


class ProfileInvalidError(AdaptationError):
    """Perfil sem uma das cinco dimensões obrigatórias."""

    def __init__(self, profile_id, missing_fields: Iterable[str]):
        self.profile_id = profile_id
        self.missing_fields = list(missing_fields)
        super().__init__(
            f"Perfil '{profile_id}' incompleto: faltando {', '.join(self.missing_fields)}"
        )


class ExtractionError(AdaptationError):
    """Não foi possível obter texto utilizável do documento original."""


class UnsupportedFormatError(AdaptationError):
    def __init__(self, file_type: Optional[str]):
        super().__init__(f"Formato de arquivo não suportado: {file_type}")
        self.file_type = file_type


class LLMInvocationError(AdaptationError):
    """Falha de transporte ou de serviço na chamada ao modelo."""


class LLMResponseFormatError(AdaptationError):
    """Resposta do modelo sem conteúdo de texto utilizável."""


class RenderError(AdaptationError):
    """Falha ao gerar o documento adaptado."""


class StorageError(AdaptationError):
    """Falha de leitura ou escrita no armazenamento de objetos."""
