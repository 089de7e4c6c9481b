import uuid

import pytest
from fastapi.testclient import TestClient

from adaptador.app import app, get_services
from tests.conftest import build_pdf, make_response


@pytest.fixture
def client(services):
    app.dependency_overrides[get_services] = lambda: services
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def material(add_material):
    return add_material(build_pdf(["Intro.", "Body text here."]), file_name="aula.pdf")


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "adaptador-de-materiais-api"}


def test_process_material(client, material, add_profile):
    ok = add_profile(profile_name="Aluno 1")
    missing_id = uuid.uuid4()

    response = client.post(f"/materials/{material.id}/process",
                           json={"profile_ids": [str(ok.id), str(missing_id)]})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["success_count"] == 1
    assert body["message"] == "1 material(is) adaptado(s) com sucesso"
    assert body["results"][0]["profile_id"] == str(ok.id)
    assert body["results"][0]["generated_file_name"] == "aula_adaptado_Aluno_1.pdf"
    assert body["results"][0]["passthrough"] is False
    assert body["failures"] == [{
        "profile_id": str(missing_id),
        "reason": f"Perfil '{missing_id}' não encontrado",
        "error_type": "ProfileNotFoundError",
    }]


def test_process_with_no_profiles(client, model_factory):
    response = client.post(f"/materials/{uuid.uuid4()}/process", json={"profile_ids": []})

    assert response.status_code == 200
    assert response.json()["success_count"] == 0
    assert model_factory.calls == []


def test_process_unknown_material(client, add_profile):
    response = client.post(f"/materials/{uuid.uuid4()}/process",
                           json={"profile_ids": [str(add_profile().id)]})

    assert response.status_code == 404


def test_process_material_without_text(client, add_material, add_profile):
    material = add_material(b"", file_type="pdf")

    response = client.post(f"/materials/{material.id}/process",
                           json={"profile_ids": [str(add_profile().id)]})

    assert response.status_code == 422


def test_process_invalid_material_id(client):
    response = client.post("/materials/nao-e-uuid/process", json={"profile_ids": []})

    assert response.status_code == 400


def test_list_and_download_adapted(client, services, material, add_profile):
    profile = add_profile()
    client.post(f"/materials/{material.id}/process", json={"profile_ids": [str(profile.id)]})

    listing = client.get(f"/materials/{material.id}/adapted").json()

    assert listing["total"] == 1
    adapted = listing["adapted_materials"][0]
    assert adapted["profile_id"] == str(profile.id)
    assert adapted["adapted_at"].endswith("Z")
    assert adapted["download_url"] == f"/adapted/{adapted['id']}/download"

    download = client.get(adapted["download_url"], follow_redirects=False)
    assert download.status_code == 307
    assert download.headers["location"].startswith("memory://adapted/")


def test_download_unknown_adapted_material(client):
    assert client.get(f"/adapted/{uuid.uuid4()}/download", follow_redirects=False).status_code == 404
    assert client.get("/adapted/xyz/download", follow_redirects=False).status_code == 400


def test_adapt_text(client, model_factory, add_profile):
    profile = add_profile()
    model_factory.respond = lambda s, c: make_response("Texto curto.")

    response = client.post("/adapt/text", json={"profile_id": str(profile.id), "text": "Texto longo."})

    assert response.status_code == 200
    assert response.json() == {"adapted_text": "Texto curto.", "passthrough": False}


def test_adapt_text_unknown_profile(client):
    response = client.post("/adapt/text", json={"profile_id": str(uuid.uuid4()), "text": "Texto."})

    assert response.status_code == 404


def test_adapt_text_incomplete_profile(client, add_profile):
    profile = add_profile(abstracao=None)

    response = client.post("/adapt/text", json={"profile_id": str(profile.id), "text": "Texto."})

    assert response.status_code == 422


def test_adapt_text_model_failure(client, model_factory, add_profile):
    def boom(system_prompt, content):
        raise ConnectionError("sem conexão")

    model_factory.respond = boom
    response = client.post("/adapt/text", json={"profile_id": str(add_profile().id), "text": "Texto."})

    assert response.status_code == 502
