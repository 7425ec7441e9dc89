"""
Destination application tables, described with the columns the jobs write.

These tables belong to the application schema, not to the engine: they live
in their own MetaData so `ensure_control_tables` never creates or alters
them. Tests create them on a scratch database.
"""

from sqlalchemy import (
    Boolean, Column, Date, DateTime, MetaData, Numeric, String, Table, Text, JSON
)
from sqlalchemy.dialects.postgresql import ARRAY

destination_metadata = MetaData()

TextArray = JSON().with_variant(ARRAY(Text), "postgresql")


def _id():
    return Column("id", String(36), primary_key=True)


def _timestamps():
    return [
        Column("created_at", DateTime(timezone=True), nullable=False),
        Column("updated_at", DateTime(timezone=True), nullable=False),
    ]


def _dimension(name: str) -> Table:
    return Table(
        name, destination_metadata,
        _id(),
        Column("name", Text, nullable=False),
        *_timestamps(),
    )


state = Table(
    "state", destination_metadata,
    _id(),
    Column("name", Text, nullable=False),
    Column("acronym", String(2), nullable=False),
    *_timestamps(),
)

gender = _dimension("gender")
civil_status = _dimension("civil_status")
education_level = _dimension("education_level")
course = _dimension("course")
educational_institution = _dimension("educational_institution")
semester = _dimension("semester")
shift = _dimension("shift")

user = Table(
    "user", destination_metadata,
    _id(),
    Column("name", Text, nullable=False),
    Column("email", Text, nullable=False, unique=True),
    Column("password", Text, nullable=False),
    Column("emailVerified", DateTime(timezone=True), nullable=True),
    Column("image", Text, nullable=True),
    Column("role", Text, nullable=False),
    *_timestamps(),
)


def _organization(name: str) -> Table:
    return Table(
        name, destination_metadata,
        _id(),
        Column("user_id", String(36), nullable=False),
        Column("notes", Text),
        Column("legal_name", Text, nullable=False),
        Column("trade_name", Text),
        Column("activities", Text),
        Column("cnpj_number", Text, nullable=False),
        Column("state_registration", Text),
        Column("address", Text),
        Column("city", Text),
        Column("state_id", String(36), nullable=False),
        Column("zip_code", Text),
        Column("phone", Text, nullable=False),
        Column("whatsapp", Text),
        *_timestamps(),
    )


company = _organization("company")
institutions = _organization("institutions")

student = Table(
    "student", destination_metadata,
    _id(),
    Column("user_id", String(36), nullable=False),
    Column("notes", Text),
    Column("full_name", Text, nullable=False),
    Column("birth_date", Date, nullable=False),
    Column("cpf_number", Text),
    Column("rg_number", Text),
    Column("issue_agency", Text),
    Column("has_driver_license", Boolean, nullable=False),
    Column("gender_id", String(36)),
    Column("civil_status_id", String(36)),
    Column("has_disability", Boolean, nullable=False),
    Column("disability_type", Text),
    Column("father_name", Text),
    Column("mother_name", Text),
    Column("address", Text),
    Column("city", Text),
    Column("state_id", String(36)),
    Column("zip_code", Text),
    Column("phone", Text),
    Column("whatsapp", Text),
    Column("education_level_id", String(36)),
    Column("course_id", String(36)),
    Column("educational_institution_id", String(36)),
    Column("has_oab_license", Boolean, nullable=False),
    Column("enrollment", Text),
    Column("semester_id", String(36)),
    Column("shift_id", String(36)),
    Column("available_shift_id", String(36)),
    Column("english_level", Text),
    Column("spanish_level", Text),
    Column("french_level", Text),
    Column("other_languages", TextArray),
    Column("improvement_courses", TextArray),
    Column("it_courses", TextArray),
    *_timestamps(),
)


def _contact(name: str, parent_column: str) -> Table:
    return Table(
        name, destination_metadata,
        _id(),
        Column(parent_column, String(36), nullable=False),
        Column("full_name", Text, nullable=False),
        Column("cpf_number", Text),
        Column("rg_number", Text),
        Column("issuing_authority", Text),
        Column("phone", Text),
        Column("whatsapp", Text),
        Column("position", Text),
        *_timestamps(),
    )


company_supervisor = _contact("company_supervisor", "company_id")
company_representative = _contact("company_representative", "company_id")
institution_supervisor = _contact("institution_supervisor", "institution_id")
institution_representative = _contact("institution_representative", "institution_id")

internship_commitment_term = Table(
    "internship_commitment_term", destination_metadata,
    _id(),
    Column("public_number", String(6), nullable=False),
    Column("notes", Text),
    Column("company_id", String(36), nullable=False),
    Column("company_supervisor_id", String(36), nullable=False),
    Column("company_supervisor_position", Text),
    Column("company_representative_id", String(36), nullable=False),
    Column("company_representative_position", Text),
    Column("institution_id", String(36), nullable=False),
    Column("institution_supervisor_id", String(36), nullable=False),
    Column("institution_supervisor_position", Text),
    Column("institution_representative_id", String(36), nullable=False),
    Column("institution_representative_position", Text),
    Column("student_id", String(36), nullable=False),
    Column("first_activity", Text),
    Column("second_activity", Text),
    Column("start_commitment_date", Date),
    Column("end_commitment_date", Date),
    Column("days_and_hours_per_week", Text),
    Column("stipend_amount", Numeric(12, 2)),
    Column("payment_frequency", Text),
    Column("transportation_allowance_amount", Numeric(12, 2)),
    Column("term_date", Date),
    Column("first_extension_date", Date),
    Column("second_extension_date", Date),
    Column("third_extension_date", Date),
    Column("termination_date", Date),
    *_timestamps(),
)

signed_internship_commitment_term = Table(
    "signed_internship_commitment_term", destination_metadata,
    _id(),
    Column("public_id", String(36), nullable=False),
    Column("internship_commitment_term_id", String(36), nullable=False),
    Column("company_id", String(36), nullable=False),
    Column("student_id", String(36), nullable=False),
    Column("pdf_url", Text),
    *_timestamps(),
)
