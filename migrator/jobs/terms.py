"""
Tier 4 and 5 jobs: internship commitment terms and their signed copies
"""

from migrator.job import Job, MigrationContext, Outcome, row_hash
from migrator.jobs.common import missing, stamped, write
from migrator.transformers.normalizer import map_payment_frequency, public_number
from models import destination
from schemas.legacy import CommitmentTermRow, SignedTermRow

TERM = "internship_commitment_term"
SIGNED_TERM = "signed_internship_commitment_term"


async def upsert_commitment_term(row: CommitmentTermRow, ctx: MigrationContext) -> Outcome:
    identity = ctx.identity
    resolved = await identity.resolve(TERM, row.co_seq_termo)

    # tb_termo references companies and institutions by their char(36) UUID,
    # which is mapped alongside the integer key by the tier 2 jobs
    company_id = await identity.get_any("company", row.empresa_id)
    company_supervisor_id = await identity.get("company_supervisor", row.supervisor_empresa_id)
    company_representative_id = await identity.get(
        "company_representative", row.representante_empresa_id
    )
    institution_id = await identity.get_any("institutions", row.instituicao_id)
    institution_supervisor_id = await identity.get(
        "institution_supervisor", row.supervisor_instituicao_id
    )
    institution_representative_id = await identity.get(
        "institution_representative", row.representante_instituicao_id
    )
    student_id = await identity.get("student", row.estudante_id)

    unresolved = missing(
        ("company", row.empresa_id, company_id),
        ("company_supervisor", row.supervisor_empresa_id, company_supervisor_id),
        ("company_representative", row.representante_empresa_id, company_representative_id),
        ("institutions", row.instituicao_id, institution_id),
        ("institution_supervisor", row.supervisor_instituicao_id, institution_supervisor_id),
        ("institution_representative", row.representante_instituicao_id,
         institution_representative_id),
        ("student", row.estudante_id, student_id),
    )
    if unresolved:
        return Outcome.skipped(*unresolved)

    await write(ctx, destination.internship_commitment_term, stamped({
        "id": resolved.new_id,
        "public_number": public_number(row.co_seq_termo),
        "notes": row.notas,
        "company_id": company_id,
        "company_supervisor_id": company_supervisor_id,
        "company_supervisor_position": row.cargo_supervisor_empresa,
        "company_representative_id": company_representative_id,
        "company_representative_position": row.cargo_representante_empresa,
        "institution_id": institution_id,
        "institution_supervisor_id": institution_supervisor_id,
        "institution_supervisor_position": row.cargo_supervisor_instituicao,
        "institution_representative_id": institution_representative_id,
        "institution_representative_position": row.cargo_representante_instituicao,
        "student_id": student_id,
        "first_activity": row.paragrafo_a,
        "second_activity": row.paragrafo_b,
        "start_commitment_date": row.data_inicio,
        "end_commitment_date": row.data_fim,
        "days_and_hours_per_week": row.hora_especial,
        "stipend_amount": row.valor_estagio,
        "payment_frequency": map_payment_frequency(row.taxa_pagamento),
        "transportation_allowance_amount": row.vale_transporte,
        "term_date": row.data,
        "first_extension_date": row.prorrogacao1,
        "second_extension_date": row.prorrogacao2,
        "third_extension_date": row.prorrogacao3,
        "termination_date": row.rescisao,
    }, row.created_at, row.updated_at))

    await identity.put_both(
        TERM, row.co_seq_termo, row.id, resolved.new_id, row_hash(row.model_dump())
    )
    return Outcome.written(resolved.new_id, resolved.existed)


async def upsert_signed_term(row: SignedTermRow, ctx: MigrationContext) -> Outcome:
    identity = ctx.identity
    resolved = await identity.resolve(SIGNED_TERM, row.id)

    term_id = await identity.get_any(TERM, row.id, row.termo_id)
    company_id = await identity.get_any("company", row.empresa_id_camel, row.empresa_id)
    student_id = await identity.get("student", row.estudante_id)

    unresolved = missing(
        (TERM, row.termo_id or row.id, term_id),
        ("company", row.empresa_id_camel or row.empresa_id, company_id),
        ("student", row.estudante_id, student_id),
    )
    if unresolved:
        return Outcome.skipped(*unresolved)

    await write(ctx, destination.signed_internship_commitment_term, stamped({
        "id": resolved.new_id,
        "public_id": resolved.new_id,
        "internship_commitment_term_id": term_id,
        "company_id": company_id,
        "student_id": student_id,
        "pdf_url": None,
    }, row.created_at, row.updated_at))

    await identity.put(SIGNED_TERM, row.id, resolved.new_id, row_hash(row.model_dump()))
    return Outcome.written(resolved.new_id, resolved.existed)


JOBS = [
    Job(
        key=TERM,
        tier=4,
        source_table="tb_termo",
        pk="co_seq_termo",
        row_schema=CommitmentTermRow,
        upsert=upsert_commitment_term,
        watermark_column="updated_at",
    ),
    Job(
        key=SIGNED_TERM,
        tier=5,
        source_table="termos",
        pk="id",
        row_schema=SignedTermRow,
        upsert=upsert_signed_term,
        watermark_column="updatedAt",
    ),
]
