"""
Armazenamento de objetos para materiais originais e adaptados.
Google Cloud Storage em produção; memória para desenvolvimento local e testes.
"""
import os
import logging
import threading
from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, Optional, Protocol, Tuple

from dotenv import load_dotenv

from adaptador.errors import StorageError

load_dotenv()

logger = logging.getLogger(__name__)

# Variável de ambiente para o bucket
GCS_BUCKET_NAME = os.getenv("GCS_BUCKET_NAME")


@dataclass(frozen=True)
class StoredObject:
    url: str
    key: str
    size: int


class ObjectStorage(Protocol):
    def put(self, key: str, data: bytes, content_type: str) -> StoredObject: ...

    def get_url(self, key: str, expiration_minutes: int = 60) -> str: ...

    def download(self, key: str) -> bytes: ...


class GCSStorage:
    """
    Objetos no Google Cloud Storage.
    Usa Application Default Credentials ou GOOGLE_APPLICATION_CREDENTIALS.
    """

    def __init__(self, bucket_name: Optional[str] = None, client=None):
        self.bucket_name = bucket_name or GCS_BUCKET_NAME
        if not self.bucket_name:
            raise ValueError("GCS_BUCKET_NAME não configurado nas variáveis de ambiente")
        self._client = client

    @property
    def client(self):
        if self._client is None:
            from google.cloud import storage
            self._client = storage.Client()
        return self._client

    def _blob(self, key: str):
        return self.client.bucket(self.bucket_name).blob(key)

    def put(self, key: str, data: bytes, content_type: str) -> StoredObject:
        """
        Faz upload de bytes para o bucket.

        Args:
            key: Nome do blob no GCS
            data: Conteúdo do arquivo
            content_type: MIME type do arquivo

        Returns:
            StoredObject com (url, key, size)
        """
        logger.info(f"Fazendo upload de {len(data)} bytes para gs://{self.bucket_name}/{key}")
        try:
            self._blob(key).upload_from_string(data, content_type=content_type)
        except Exception as e:
            logger.error(f"Erro no upload para GCS: {e}")
            raise StorageError(f"Falha no upload de {key}: {e}") from e

        url = f"gs://{self.bucket_name}/{key}"
        logger.info(f"Upload concluído: {url} ({len(data)} bytes)")
        return StoredObject(url=url, key=key, size=len(data))

    def get_url(self, key: str, expiration_minutes: int = 60) -> str:
        """Gera uma URL assinada (v4) para download temporário."""
        logger.info(f"Gerando URL assinada para {key}")
        try:
            url = self._blob(key).generate_signed_url(
                version="v4",
                expiration=timedelta(minutes=expiration_minutes),
                method="GET"
            )
        except Exception as e:
            logger.error(f"Erro ao gerar URL assinada: {e}")
            raise StorageError(f"Falha ao gerar URL assinada para {key}: {e}") from e

        logger.info(f"URL assinada gerada com expiração de {expiration_minutes} minutos")
        return url

    def download(self, key: str) -> bytes:
        logger.info(f"Baixando gs://{self.bucket_name}/{key}")
        try:
            return self._blob(key).download_as_bytes()
        except Exception as e:
            logger.error(f"Erro ao baixar {key}: {e}")
            raise StorageError(f"Falha ao baixar {key}: {e}") from e


class InMemoryStorage:
    """Armazenamento em memória para rodar sem dependências externas."""

    def __init__(self):
        self._objects: Dict[str, Tuple[bytes, str]] = {}
        self._lock = threading.Lock()

    def put(self, key: str, data: bytes, content_type: str) -> StoredObject:
        with self._lock:
            self._objects[key] = (bytes(data), content_type)
        logger.debug(f"Objeto armazenado em memória: {key} ({len(data)} bytes)")
        return StoredObject(url=f"memory://{key}", key=key, size=len(data))

    def get_url(self, key: str, expiration_minutes: int = 60) -> str:
        with self._lock:
            if key not in self._objects:
                raise StorageError(f"Objeto {key} não encontrado")
        return f"memory://{key}?expires_in={expiration_minutes * 60}"

    def download(self, key: str) -> bytes:
        with self._lock:
            if key not in self._objects:
                raise StorageError(f"Objeto {key} não encontrado")
            return self._objects[key][0]

    def content_type(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._objects.get(key)
        return entry[1] if entry else None

    def __len__(self):
        return len(self._objects)
