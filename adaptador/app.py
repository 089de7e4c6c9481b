import logging
import uuid as uuid_lib
from fastapi import FastAPI, HTTPException, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from adaptador.models import (
    ProcessMaterialRequest, ProcessMaterialResponse, AdaptedResult, ProfileFailureResponse,
    AdaptedMaterialResponse, AdaptedMaterialsListResponse, AdaptTextRequest, AdaptTextResponse
)
from adaptador.errors import (
    AdaptationError, ExtractionError, MaterialNotFoundError, ProfileInvalidError,
    UnsupportedFormatError, StorageError
)
from adaptador.llm import adapt_text_content
from adaptador.services import AdaptationServices, USE_MEMORY_STORE, build_services
from adaptador.worker import run_adaptation_batch

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Adaptador de Materiais API",
    description="API para adaptação de materiais didáticos conforme perfis de acessibilidade",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, replace with specific origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_services = None


def get_services() -> AdaptationServices:
    """Dependency com os colaboradores montados na inicialização."""
    global _services
    if _services is None:
        _services = build_services()
    return _services


@app.on_event("startup")
async def startup_event():
    """Inicializa o banco de dados e os serviços na inicialização."""
    try:
        if not USE_MEMORY_STORE:
            from adaptador.database import init_db
            init_db()
            logger.info("Banco de dados inicializado com sucesso")
        get_services()
    except Exception as e:
        logger.warning(f"Não foi possível inicializar os serviços: {e}")


def _parse_uuid(value: str, label: str) -> uuid_lib.UUID:
    try:
        return uuid_lib.UUID(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"ID de {label} inválido")


@app.get("/")
async def root():
    return {"message": "Adaptador de Materiais API is running. Go to /docs for Swagger UI."}


@app.get("/health")
async def health_check():
    """
    Health check endpoint (público).
    Usado para monitoramento e load balancers.
    """
    return {"status": "healthy", "service": "adaptador-de-materiais-api"}


@app.post("/materials/{material_id}/process", response_model=ProcessMaterialResponse)
def process_material(
    material_id: str,
    request: ProcessMaterialRequest,
    services: AdaptationServices = Depends(get_services)
):
    """
    Adapta o material para cada perfil informado.
    Falhas de perfis individuais não interrompem o lote; só falhas do
    material (inexistente ou sem texto) retornam erro.
    """
    material_uuid = _parse_uuid(material_id, "material")
    logger.info(f"Processando material {material_id} para {len(request.profile_ids)} perfil(is)")

    try:
        batch = run_adaptation_batch(material_uuid, request.profile_ids, services)
    except MaterialNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (ExtractionError, UnsupportedFormatError) as e:
        logger.error(f"Erro na extração do material {material_id}: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    return ProcessMaterialResponse(
        success=True,
        results=[AdaptedResult(**vars(r)) for r in batch.results],
        success_count=batch.success_count,
        failures=[ProfileFailureResponse(**vars(f)) for f in batch.failures],
        message=f"{batch.success_count} material(is) adaptado(s) com sucesso"
    )


@app.get("/materials/{material_id}/adapted", response_model=AdaptedMaterialsListResponse)
def list_adapted_materials(
    material_id: str,
    services: AdaptationServices = Depends(get_services)
):
    """
    Lista o histórico de materiais adaptados de um material.
    """
    material_uuid = _parse_uuid(material_id, "material")
    adapted = services.adapted_materials.list_by_material(material_uuid)

    response_list = [
        AdaptedMaterialResponse(**a.to_dict(), download_url=f"/adapted/{a.id}/download")
        for a in adapted
    ]
    return AdaptedMaterialsListResponse(adapted_materials=response_list, total=len(response_list))


@app.get("/adapted/{adapted_material_id}/download")
def download_adapted_material(
    adapted_material_id: str,
    services: AdaptationServices = Depends(get_services)
):
    """
    Gera URL assinada para download de um material adaptado.
    """
    logger.info(f"Gerando URL de download para material adaptado {adapted_material_id}")

    # Validar como UUID para prevenir Open Redirect
    adapted_uuid = _parse_uuid(adapted_material_id, "material adaptado")

    adapted = services.adapted_materials.get_by_id(adapted_uuid)
    if not adapted:
        raise HTTPException(status_code=404, detail="Material adaptado não encontrado")

    try:
        signed_url = services.storage.get_url(adapted.adapted_file_key, expiration_minutes=60)
    except StorageError as e:
        logger.error(f"Erro ao gerar URL assinada: {e}")
        raise HTTPException(status_code=500, detail="Erro ao gerar link de download")

    return RedirectResponse(url=signed_url)


@app.post("/adapt/text", response_model=AdaptTextResponse)
def adapt_text(
    request: AdaptTextRequest,
    services: AdaptationServices = Depends(get_services)
):
    """
    Adapta um texto avulso para um perfil, sem gerar documento.
    """
    profile = services.profiles.get_by_id(request.profile_id)
    if not profile:
        raise HTTPException(status_code=404, detail="Perfil não encontrado")

    try:
        result = adapt_text_content(request.text, profile, services.llm)
    except ProfileInvalidError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except AdaptationError as e:
        logger.error(f"Erro ao adaptar texto: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return AdaptTextResponse(adapted_text=result.text, passthrough=result.is_passthrough)
