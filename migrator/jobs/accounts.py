"""
Tier 2 jobs: companies, educational institutions and students
"""

from sqlalchemy import func

from migrator.job import Job, MigrationContext, Outcome, row_hash
from migrator.jobs.common import missing, stamped, write
from migrator.transformers.normalizer import (
    map_language_level,
    normalize_cpf,
    normalize_phone,
    normalize_zip,
    optional_str,
    phone_or_default,
    required_str,
    to_string_list,
)
from models import destination
from schemas.legacy import CompanyRow, InstitutionRow, OrganizationRow, StudentRow


def organization_upsert(entity: str, seq_field: str):
    """
    Companies and institutions: keyed by their integer sequence, with the
    char(36) UUID mapped as a second legacy key. Both need a migrated user
    and a known state acronym.
    """
    table = destination.destination_metadata.tables[entity]

    async def upsert(row: OrganizationRow, ctx: MigrationContext) -> Outcome:
        legacy_seq = getattr(row, seq_field)
        resolved = await ctx.identity.resolve(entity, legacy_seq)
        user_id = await ctx.identity.get("user", row.user_id)
        uf = required_str(row.ds_uf).upper()
        state_id = ctx.lookups.state_by_uf.get(uf)

        unresolved = missing(("user", row.user_id, user_id), ("state", uf, state_id))
        if unresolved:
            return Outcome.skipped(*unresolved)

        await write(ctx, table, stamped({
            "id": resolved.new_id,
            "user_id": user_id,
            "notes": optional_str(row.notes),
            "legal_name": required_str(row.ds_razao_social),
            "trade_name": optional_str(row.ds_nome_fantasia),
            "activities": optional_str(row.ds_atividade),
            "cnpj_number": required_str(row.nu_cnpj),
            "state_registration": optional_str(row.ds_insc_est),
            "address": optional_str(row.ds_endereco),
            "city": optional_str(row.ds_cidade),
            "state_id": state_id,
            "zip_code": normalize_zip(row.nu_cep),
            "phone": phone_or_default(row.nu_telefone),
            "whatsapp": optional_str(normalize_phone(row.nu_fax)),
        }, row.created_at, row.updated_at))

        await ctx.identity.put_both(
            entity, legacy_seq, row.id, resolved.new_id, row_hash(row.model_dump())
        )
        return Outcome.written(resolved.new_id, resolved.existed)

    upsert.__name__ = f"upsert_{entity}"
    return upsert


async def upsert_student(row: StudentRow, ctx: MigrationContext) -> Outcome:
    resolved = await ctx.identity.resolve("student", row.id)
    user_id = await ctx.identity.get("user", row.usuario_id)
    if not user_id:
        return Outcome.skipped(*missing(("user", row.usuario_id, user_id)))

    identity = ctx.identity
    lookups = ctx.lookups

    # Gender is either a numeric legacy key or free text ("M", "feminino", ...)
    gender_id = None
    if row.genero is not None and str(row.genero).strip().isdigit():
        gender_id = await identity.get("gender", row.genero)
    gender_id = gender_id or lookups.gender_id(row.genero) or lookups.default_gender_id

    semester_id = await identity.get("semester", row.semestre_id) or lookups.default_semester_id
    shift_id = await identity.get("shift", row.turno_id)

    await write(ctx, destination.student, stamped({
        "id": resolved.new_id,
        "user_id": user_id,
        "notes": optional_str(row.notas),
        "full_name": required_str(row.nome_completo),
        "birth_date": row.data_nascimento or func.current_date(),
        "cpf_number": normalize_cpf(row.cpf),
        "rg_number": required_str(row.rg),
        "issue_agency": optional_str(row.orgao_expedidor),
        "has_driver_license": bool(row.possui_cnh),
        "gender_id": gender_id,
        "civil_status_id": await identity.get("civil_status", row.estado_civil_id),
        "has_disability": bool(row.possui_deficiencia),
        "disability_type": optional_str(row.tipo_deficiencia),
        "father_name": optional_str(row.nome_pai),
        "mother_name": optional_str(row.nome_mae),
        "address": optional_str(row.endereco),
        "city": optional_str(row.cidade),
        "state_id": await identity.get("state", row.estado_id),
        "zip_code": normalize_zip(row.cep),
        "phone": normalize_phone(row.telefone),
        "whatsapp": optional_str(normalize_phone(row.whatsapp)),
        "education_level_id": await identity.get("education_level", row.nivel_escolaridade_id),
        "course_id": await identity.get("course", row.curso_id),
        "educational_institution_id": await identity.get(
            "educational_institution", row.instituicao_id
        ),
        "has_oab_license": bool(row.possui_oab),
        "enrollment": optional_str(row.matricula),
        "semester_id": semester_id,
        "shift_id": shift_id,
        "available_shift_id": shift_id,
        "english_level": map_language_level(row.ingles),
        "spanish_level": map_language_level(row.espanhol),
        "french_level": map_language_level(row.frances),
        "other_languages": to_string_list(row.outro_idioma),
        "improvement_courses": to_string_list(row.improvement_course),
        "it_courses": to_string_list(row.it_course),
    }, row.created_at, row.updated_at))

    await identity.put("student", row.id, resolved.new_id, row_hash(row.model_dump()))
    return Outcome.written(resolved.new_id, resolved.existed)


JOBS = [
    Job(
        key="company",
        tier=2,
        source_table="tb_empresa",
        pk="co_seq_empresa",
        row_schema=CompanyRow,
        upsert=organization_upsert("company", "co_seq_empresa"),
        watermark_column="updated_at",
    ),
    Job(
        key="institutions",
        tier=2,
        source_table="tb_instituicao",
        pk="co_seq_instituicao",
        row_schema=InstitutionRow,
        upsert=organization_upsert("institutions", "co_seq_instituicao"),
        watermark_column="updated_at",
    ),
    Job(
        key="student",
        tier=2,
        source_table="tb_estudante",
        pk="id",
        row_schema=StudentRow,
        upsert=upsert_student,
        watermark_column="updatedAt",
    ),
]
