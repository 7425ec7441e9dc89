"""
Tier 3 jobs: supervisors and representatives of companies and institutions
"""

from migrator.job import Job, MigrationContext, Outcome, row_hash
from migrator.jobs.common import missing, stamped, write
from migrator.transformers.normalizer import (
    normalize_cpf, normalize_phone, optional_str, required_str
)
from models import destination
from schemas.legacy import ContactRow


def contact_upsert(entity: str, parent_entity: str, parent_field: str, parent_column: str):
    table = destination.destination_metadata.tables[entity]

    async def upsert(row: ContactRow, ctx: MigrationContext) -> Outcome:
        parent_legacy = getattr(row, parent_field)
        parent_id = await ctx.identity.get(parent_entity, parent_legacy)
        if not parent_id:
            return Outcome.skipped(*missing((parent_entity, parent_legacy, parent_id)))

        resolved = await ctx.identity.resolve(entity, row.id)
        await write(ctx, table, stamped({
            "id": resolved.new_id,
            parent_column: parent_id,
            "full_name": required_str(row.full_name),
            "cpf_number": normalize_cpf(row.cpf),
            "rg_number": optional_str(row.rg),
            "issuing_authority": optional_str(row.issuing_authority),
            "phone": optional_str(normalize_phone(row.telefone)),
            "whatsapp": optional_str(normalize_phone(row.celular)),
            "position": optional_str(row.cargo),
        }, row.created_at, row.updated_at))

        await ctx.identity.put(entity, row.id, resolved.new_id, row_hash(row.model_dump()))
        return Outcome.written(resolved.new_id, resolved.existed)

    upsert.__name__ = f"upsert_{entity}"
    return upsert


def _contact_job(key: str, source_table: str, parent_entity: str,
                 parent_field: str, parent_column: str) -> Job:
    return Job(
        key=key,
        tier=3,
        source_table=source_table,
        pk="id",
        row_schema=ContactRow,
        upsert=contact_upsert(key, parent_entity, parent_field, parent_column),
        watermark_column="updated_at",
    )


JOBS = [
    _contact_job("company_supervisor", "supervisor_empresas",
                 "company", "empresa_id", "company_id"),
    _contact_job("company_representative", "representante_empresas",
                 "company", "empresa_id", "company_id"),
    _contact_job("institution_supervisor", "supervisor_instituicaos",
                 "institutions", "instituicao_id", "institution_id"),
    _contact_job("institution_representative", "representante_instituicaos",
                 "institutions", "instituicao_id", "institution_id"),
]
