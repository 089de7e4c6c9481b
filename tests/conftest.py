import threading
import uuid
from types import SimpleNamespace

import fitz
import pytest

from adaptador.entities import Material, StudentProfile, Turma
from adaptador.llm import LLMAdapterClient
from adaptador.services import build_memory_services


def make_response(text, finish_reason="STOP"):
    parts = [] if text is None else [SimpleNamespace(text=text)]
    candidate = SimpleNamespace(content=SimpleNamespace(parts=parts), finish_reason=finish_reason)
    return SimpleNamespace(candidates=[candidate])


def echo_adaptation(system_prompt, user_content):
    original = user_content.split("\n\n", 1)[1]
    return make_response(f"Texto adaptado.\n\n{original}")


class FakeModel:
    def __init__(self, factory, system_prompt):
        self.factory = factory
        self.system_prompt = system_prompt

    def generate_content(self, content, request_options=None):
        with self.factory.lock:
            self.factory.calls.append(
                SimpleNamespace(system_prompt=self.system_prompt, content=content,
                                request_options=request_options)
            )
        return self.factory.respond(self.system_prompt, content)


class FakeModelFactory:
    """Substitui o GenerativeModel: registra as chamadas e devolve respostas montadas."""

    def __init__(self, respond=None):
        self.calls = []
        self.lock = threading.Lock()
        self.respond = respond or echo_adaptation

    def __call__(self, system_prompt):
        return FakeModel(self, system_prompt)


def build_pdf(paragraphs):
    """PDF simples com cada parágrafo bem separado verticalmente."""
    doc = fitz.open()
    page = doc.new_page()
    y = 72
    for paragraph in paragraphs:
        page.insert_text((72, y), paragraph, fontname="helv", fontsize=11)
        y += 150
    data = doc.tobytes()
    doc.close()
    return data


def make_profile(class_id=None, **overrides):
    fields = dict(
        class_id=class_id or uuid.uuid4(),
        profile_name="Aluno A",
        fragmentacao="media",
        abstracao="baixa",
        mediacao="passo_a_passo",
        dislexia="sim",
        tipo_letra="normal",
        observacoes=None,
    )
    fields.update(overrides)
    return StudentProfile(**fields)


@pytest.fixture
def model_factory():
    return FakeModelFactory()


@pytest.fixture
def services(model_factory):
    return build_memory_services(llm=LLMAdapterClient(model_factory=model_factory, timeout=30))


@pytest.fixture
def turma(services):
    return services.classes.create(Turma(user_id="professor-1", name="7º ano B"))


@pytest.fixture
def add_profile(services, turma):
    def _add(**overrides):
        return services.profiles.create(make_profile(class_id=turma.id, **overrides))
    return _add


@pytest.fixture
def add_material(services, turma):
    def _add(data, file_type="pdf", file_name=None):
        file_name = file_name or f"aula.{file_type}"
        key = f"materials/{turma.id}/{file_name}"
        stored = services.storage.put(key, data, "application/octet-stream")
        return services.materials.create(Material(
            class_id=turma.id, file_name=file_name, file_type=file_type,
            file_url=stored.url, file_key=stored.key, file_size=stored.size,
        ))
    return _add
