"""
Leitura e geração dos documentos (PDF e DOCX).

A extração usa PyMuPDF para PDF e python-docx para DOCX; a geração usa as
mesmas bibliotecas, com a tipografia derivada do perfil do aluno.
"""
import io
import re
import logging
import unicodedata
from dataclasses import dataclass
from typing import List

import fitz  # PyMuPDF
from docx import Document
from docx.shared import Pt, Inches
from docx.table import Table

from adaptador.entities import StudentProfile
from adaptador.errors import ExtractionError, RenderError, UnsupportedFormatError

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("pdf", "docx")

CONTENT_TYPES = {
    "pdf": "application/pdf",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}

PAGE_WIDTH, PAGE_HEIGHT = fitz.paper_size("a4")
PAGE_MARGIN = 40

PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")


@dataclass(frozen=True)
class Typography:
    """Parâmetros tipográficos do documento adaptado."""
    is_sans_serif: bool = False
    is_dyslexia_mode: bool = False

    @classmethod
    def from_profile(cls, profile: StudentProfile) -> "Typography":
        return cls(
            is_sans_serif=profile.tipo_letra == "bastao",
            is_dyslexia_mode=profile.dislexia == "sim",
        )

    @property
    def font_size(self) -> int:
        return 14 if self.is_dyslexia_mode else 12

    @property
    def line_spacing(self) -> float:
        return 1.5 if self.is_dyslexia_mode else 1.15

    @property
    def paragraph_gap(self) -> int:
        return 12 if self.is_dyslexia_mode else 6

    @property
    def pdf_font(self) -> str:
        # Fontes base-14 do PDF: Helvetica e Times-Roman
        return "helv" if self.is_sans_serif else "tiro"

    @property
    def docx_font(self) -> str:
        return "Arial" if self.is_sans_serif else "Calibri"


def content_type_for(file_type: str) -> str:
    if file_type not in CONTENT_TYPES:
        raise UnsupportedFormatError(file_type)
    return CONTENT_TYPES[file_type]


def split_paragraphs(text: str) -> List[str]:
    """Parágrafos separados por linha em branco, na ordem original."""
    return [p.strip("\n") for p in PARAGRAPH_SPLIT.split(text) if p.strip()]


# ===== EXTRAÇÃO =====

def _ensure_text(paragraphs: List[str], file_type: str) -> str:
    text = "\n\n".join(paragraphs)
    if not re.search(r"\w", text):
        raise ExtractionError(f"Documento {file_type.upper()} sem texto extraível")
    return text


def extract_text_from_pdf(data: bytes) -> str:
    """Extrai o texto do PDF bloco a bloco; cada bloco vira um parágrafo."""
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:
        logger.error(f"Erro ao abrir PDF: {e}")
        raise ExtractionError(f"Não foi possível ler o PDF: {e}") from e

    paragraphs = []
    with doc:
        if doc.needs_pass:
            raise ExtractionError("PDF protegido por senha")
        try:
            for page in doc:
                for block in page.get_text("blocks"):
                    # (x0, y0, x1, y1, texto, número, tipo); tipo 1 é imagem
                    if block[6] != 0:
                        continue
                    lines = [line.strip() for line in block[4].splitlines() if line.strip()]
                    if lines:
                        paragraphs.append(" ".join(lines))
        except Exception as e:
            logger.error(f"Erro ao extrair texto do PDF: {e}")
            raise ExtractionError(f"Falha ao extrair texto do PDF: {e}") from e

    logger.info(f"PDF lido: {len(paragraphs)} parágrafos extraídos")
    return _ensure_text(paragraphs, "pdf")


def _table_paragraphs(table: Table) -> List[str]:
    paragraphs = []
    seen = set()
    for row in table.rows:
        for cell in row.cells:
            # Células mescladas aparecem repetidas em row.cells
            if cell._tc in seen:
                continue
            seen.add(cell._tc)
            paragraphs.extend(p.text.strip() for p in cell.paragraphs if p.text.strip())
    return paragraphs


def extract_text_from_docx(data: bytes) -> str:
    """Extrai parágrafos e tabelas do DOCX na ordem em que aparecem no corpo."""
    try:
        doc = Document(io.BytesIO(data))
    except Exception as e:
        logger.error(f"Erro ao abrir DOCX: {e}")
        raise ExtractionError(f"Não foi possível ler o DOCX: {e}") from e

    paragraphs = []
    for block in doc.iter_inner_content():
        if isinstance(block, Table):
            paragraphs.extend(_table_paragraphs(block))
        elif block.text.strip():
            paragraphs.append(block.text.strip())

    logger.info(f"DOCX lido: {len(paragraphs)} parágrafos extraídos")
    return _ensure_text(paragraphs, "docx")


def extract_text(data: bytes, file_type: str) -> str:
    if file_type == "pdf":
        return extract_text_from_pdf(data)
    if file_type == "docx":
        return extract_text_from_docx(data)
    raise UnsupportedFormatError(file_type)


# ===== GERAÇÃO =====

def _printable(line: str) -> str:
    # Caracteres de formatação invisíveis (Cf) não têm glifo
    return "".join(c for c in line if unicodedata.category(c) != "Cf")


def missing_glyphs(text: str, font: fitz.Font) -> List[str]:
    """Caracteres que nem a fonte nem as fontes de fallback do MuPDF conseguem desenhar."""
    return sorted({
        c for c in _printable(text)
        if not c.isspace() and not font.has_glyph(ord(c), fallback=True)
    })


def _split_word(word: str, font: fitz.Font, fontsize: float, max_width: float) -> List[str]:
    """Quebra uma palavra mais larga que a coluna em pedaços que cabem nela."""
    pieces = []
    current = ""
    for char in word:
        if current and font.text_length(current + char, fontsize=fontsize) > max_width:
            pieces.append(current)
            current = char
        else:
            current += char
    pieces.append(current)
    return pieces


def _wrap_line(line: str, font: fitz.Font, fontsize: float, max_width: float) -> List[str]:
    wrapped = []
    current = ""
    for word in line.split():
        candidate = f"{current} {word}" if current else word
        if font.text_length(candidate, fontsize=fontsize) <= max_width:
            current = candidate
            continue
        if current:
            wrapped.append(current)
        pieces = _split_word(word, font, fontsize, max_width)
        wrapped.extend(pieces[:-1])
        current = pieces[-1]
    wrapped.append(current)
    return wrapped


def generate_pdf_from_text(text: str, typography: Typography) -> bytes:
    """
    Gera um PDF A4 com um bloco por parágrafo, quebrando páginas quando necessário.

    A fonte do perfil é embutida no arquivo; glifos que ela não tem (setas,
    símbolos matemáticos, letras gregas) vêm das fontes Noto do MuPDF. Se algum
    caractere não puder ser desenhado o documento não é gerado.
    """
    paragraphs = split_paragraphs(text)
    if not paragraphs:
        raise RenderError("Nenhum conteúdo para gerar o documento")

    fontsize = typography.font_size
    leading = fontsize * typography.line_spacing
    max_width = PAGE_WIDTH - 2 * PAGE_MARGIN
    bottom = PAGE_HEIGHT - PAGE_MARGIN

    try:
        font = fitz.Font(typography.pdf_font)
        missing = missing_glyphs(text, font)
        if missing:
            raise RenderError(f"Caracteres sem glifo disponível: {', '.join(repr(c) for c in missing)}")

        doc = fitz.open()
        page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        writer = fitz.TextWriter(page.rect)
        written = False
        y = PAGE_MARGIN

        for paragraph in paragraphs:
            for raw_line in paragraph.split("\n"):
                for line in _wrap_line(_printable(raw_line), font, fontsize, max_width):
                    if y + leading > bottom:
                        if written:
                            writer.write_text(page)
                        page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
                        writer = fitz.TextWriter(page.rect)
                        written = False
                        y = PAGE_MARGIN
                    if line:
                        writer.append((PAGE_MARGIN, y + fontsize), line, font=font, fontsize=fontsize)
                        written = True
                    y += leading
            y += typography.paragraph_gap

        if written:
            writer.write_text(page)
        data = doc.tobytes(garbage=3, deflate=True)
        doc.close()
    except RenderError:
        raise
    except Exception as e:
        logger.error(f"Erro ao gerar PDF: {e}")
        raise RenderError(f"Falha ao gerar o PDF: {e}") from e

    logger.info(f"PDF gerado: {len(paragraphs)} parágrafos, fonte {font.name} {fontsize}pt")
    return data


def generate_docx_from_text(text: str, typography: Typography) -> bytes:
    """Gera um DOCX com um parágrafo Word por parágrafo do texto."""
    paragraphs = split_paragraphs(text)
    if not paragraphs:
        raise RenderError("Nenhum conteúdo para gerar o documento")

    try:
        doc = Document()

        normal_style = doc.styles['Normal']
        normal_style.font.name = typography.docx_font
        normal_style.font.size = Pt(typography.font_size)
        normal_style.paragraph_format.line_spacing = typography.line_spacing
        normal_style.paragraph_format.space_after = Pt(typography.paragraph_gap)

        for section in doc.sections:
            section.top_margin = Inches(1)
            section.bottom_margin = Inches(1)
            section.left_margin = Inches(1)
            section.right_margin = Inches(1)

        for paragraph in paragraphs:
            # Quebras simples viram quebras de linha dentro do parágrafo
            doc.add_paragraph(paragraph, style='Normal')

        buffer = io.BytesIO()
        doc.save(buffer)
    except Exception as e:
        logger.error(f"Erro ao gerar DOCX: {e}")
        raise RenderError(f"Falha ao gerar o DOCX: {e}") from e

    logger.info(f"DOCX gerado: {len(paragraphs)} parágrafos, fonte {typography.docx_font} {typography.font_size}pt")
    return buffer.getvalue()


def render_document(text: str, file_type: str, typography: Typography) -> bytes:
    if file_type == "pdf":
        return generate_pdf_from_text(text, typography)
    if file_type == "docx":
        return generate_docx_from_text(text, typography)
    raise UnsupportedFormatError(file_type)
