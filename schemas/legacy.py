"""
Pydantic schemas for rows read from the legacy database.

Each job validates its extracted rows against one of these models at the
extraction boundary; the upsert only sees typed attributes.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Legacy keys are integer sequences or char(36) UUIDs depending on the table
LegacyKey = Union[int, str]


class LegacyRow(BaseModel):
    """
    Base schema for legacy rows.

    Ensures:
    - Unknown columns are ignored (tables are read with select *)
    - Numbers are accepted where the legacy column is text
    - Null bytes are stripped from every string value
    """

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    @field_validator("*", mode="before")
    @classmethod
    def strip_null_bytes(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.replace("\x00", "")
        return v


def date_only(v: Any) -> Any:
    """DATETIME values stored in DATE-like columns keep only the date part"""
    if isinstance(v, datetime):
        return v.date()
    return v


class TimestampedRow(LegacyRow):
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================================
# Tier 1
# ============================================================================

class StateRow(LegacyRow):
    id: LegacyKey
    name: str = Field(..., min_length=1)
    acronym: str = Field(..., min_length=2, max_length=2)

    @field_validator("acronym")
    @classmethod
    def upper_acronym(cls, v: str) -> str:
        return v.strip().upper()


class DimensionRow(TimestampedRow):
    id: LegacyKey
    name: str = Field(..., min_length=1)


class UserRow(TimestampedRow):
    co_seq_usuario: LegacyKey
    id: Optional[str] = None  # char(36) UUID
    name: Optional[str] = None
    ds_login: Optional[str] = None
    email: Optional[str] = None
    password_hash: Optional[str] = None
    ds_senha: Optional[str] = None
    image: Optional[str] = None
    role: Optional[str] = None


# ============================================================================
# Tier 2
# ============================================================================

class OrganizationRow(TimestampedRow):
    """tb_empresa and tb_instituicao share their layout"""
    id: Optional[str] = None  # char(36) UUID
    user_id: Optional[LegacyKey] = None
    ds_razao_social: Optional[str] = None
    ds_nome_fantasia: Optional[str] = None
    ds_atividade: Optional[str] = None
    nu_cnpj: Optional[str] = None
    ds_insc_est: Optional[str] = None
    ds_endereco: Optional[str] = None
    ds_cidade: Optional[str] = None
    ds_uf: Optional[str] = None
    nu_cep: Optional[str] = None
    nu_telefone: Optional[str] = None
    nu_fax: Optional[str] = None


class CompanyRow(OrganizationRow):
    co_seq_empresa: LegacyKey
    notes: Optional[str] = Field(None, alias="ds_obs_futura_emp")


class InstitutionRow(OrganizationRow):
    co_seq_instituicao: LegacyKey
    notes: Optional[str] = Field(None, alias="ds_obs_futura_inst")


class StudentRow(LegacyRow):
    id: LegacyKey
    usuario_id: Optional[LegacyKey] = None
    notas: Optional[str] = None
    nome_completo: Optional[str] = None
    data_nascimento: Optional[date] = None
    cpf: Optional[str] = None
    rg: Optional[str] = None
    orgao_expedidor: Optional[str] = None
    possui_cnh: Optional[bool] = None
    genero: Optional[str] = None
    estado_civil_id: Optional[LegacyKey] = None
    possui_deficiencia: Optional[bool] = None
    tipo_deficiencia: Optional[str] = None
    nome_pai: Optional[str] = None
    nome_mae: Optional[str] = None
    endereco: Optional[str] = None
    cidade: Optional[str] = None
    estado_id: Optional[LegacyKey] = None
    cep: Optional[str] = None
    telefone: Optional[str] = None
    whatsapp: Optional[str] = None
    nivel_escolaridade_id: Optional[LegacyKey] = None
    curso_id: Optional[LegacyKey] = None
    instituicao_id: Optional[LegacyKey] = None
    possui_oab: Optional[bool] = None
    matricula: Optional[str] = None
    semestre_id: Optional[LegacyKey] = None
    turno_id: Optional[LegacyKey] = None
    ingles: Optional[str] = None
    espanhol: Optional[str] = None
    frances: Optional[str] = None
    outro_idioma: Optional[Any] = None
    improvement_course: Optional[Any] = Field(None, alias="ImprovementCourse")
    it_course: Optional[Any] = Field(None, alias="ITCourse")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    _birth_date = field_validator("data_nascimento", mode="before")(date_only)


# ============================================================================
# Tier 3
# ============================================================================

class ContactRow(TimestampedRow):
    """Supervisors and representatives of companies and institutions"""
    id: LegacyKey
    empresa_id: Optional[LegacyKey] = None
    instituicao_id: Optional[LegacyKey] = None
    full_name: Optional[str] = Field(None, alias="nomeCompleto")
    cpf: Optional[str] = None
    rg: Optional[str] = None
    issuing_authority: Optional[str] = Field(None, alias="orgaoEmissor")
    telefone: Optional[str] = None
    celular: Optional[str] = None
    cargo: Optional[str] = None


# ============================================================================
# Tier 4 and 5
# ============================================================================

class CommitmentTermRow(TimestampedRow):
    co_seq_termo: LegacyKey
    id: Optional[str] = None  # char(36) UUID
    notas: Optional[str] = None
    empresa_id: Optional[LegacyKey] = None
    supervisor_empresa_id: Optional[LegacyKey] = None
    cargo_supervisor_empresa: Optional[str] = None
    representante_empresa_id: Optional[LegacyKey] = None
    cargo_representante_empresa: Optional[str] = None
    instituicao_id: Optional[LegacyKey] = None
    supervisor_instituicao_id: Optional[LegacyKey] = None
    cargo_supervisor_instituicao: Optional[str] = None
    representante_instituicao_id: Optional[LegacyKey] = None
    cargo_representante_instituicao: Optional[str] = None
    estudante_id: Optional[LegacyKey] = None
    paragrafo_a: Optional[str] = None
    paragrafo_b: Optional[str] = None
    data_inicio: Optional[date] = None
    data_fim: Optional[date] = None
    hora_especial: Optional[str] = None
    valor_estagio: Optional[Decimal] = None
    taxa_pagamento: Optional[str] = None
    vale_transporte: Optional[Decimal] = None
    data: Optional[date] = None
    prorrogacao1: Optional[date] = None
    prorrogacao2: Optional[date] = None
    prorrogacao3: Optional[date] = None
    rescisao: Optional[date] = None

    _dates = field_validator(
        "data_inicio", "data_fim", "data", "prorrogacao1", "prorrogacao2",
        "prorrogacao3", "rescisao", mode="before"
    )(date_only)


class SignedTermRow(LegacyRow):
    id: LegacyKey
    termo_id: Optional[LegacyKey] = Field(None, alias="termoId")
    empresa_id_camel: Optional[LegacyKey] = Field(None, alias="empresaId")
    empresa_id: Optional[LegacyKey] = None
    estudante_id: Optional[LegacyKey] = Field(None, alias="estudanteId")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")
