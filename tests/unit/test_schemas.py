"""
Unit tests for legacy row schemas
"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from pydantic import ValidationError

from schemas.legacy import (
    CommitmentTermRow, CompanyRow, ContactRow, SignedTermRow, StateRow, StudentRow, UserRow
)


class TestLegacyRow:
    def test_null_bytes_stripped_and_extra_columns_ignored(self):
        row = StateRow.model_validate({
            "id": 1, "name": "São\x00 Paulo", "acronym": "sp", "ibge": 35
        })

        assert row.name == "São Paulo"
        assert row.acronym == "SP"
        assert not hasattr(row, "ibge")

    def test_acronym_must_have_two_letters(self):
        with pytest.raises(ValidationError):
            StateRow.model_validate({"id": 1, "name": "São Paulo", "acronym": "SPX"})

    def test_numbers_accepted_for_text_columns(self):
        row = UserRow.model_validate({"co_seq_usuario": 5, "ds_login": 12345})

        assert row.co_seq_usuario == 5
        assert row.ds_login == "12345"
        assert row.email is None


class TestAliases:
    def test_camel_case_columns(self):
        row = StudentRow.model_validate({
            "id": 1,
            "ImprovementCourse": "Excel",
            "ITCourse": "Python",
            "createdAt": "2024-01-01 10:00:00",
            "data_nascimento": datetime(2000, 5, 1, 0, 0),
        })

        assert row.improvement_course == "Excel"
        assert row.it_course == "Python"
        assert row.created_at == datetime(2024, 1, 1, 10, 0)
        assert row.data_nascimento == date(2000, 5, 1)

    def test_contact_aliases(self):
        row = ContactRow.model_validate({
            "id": 3, "empresa_id": 7, "nomeCompleto": "João", "orgaoEmissor": "SSP"
        })

        assert row.full_name == "João"
        assert row.issuing_authority == "SSP"

    def test_company_notes_alias(self):
        row = CompanyRow.model_validate({"co_seq_empresa": 7, "ds_obs_futura_emp": "obs"})

        assert row.notes == "obs"

    def test_signed_term_keeps_both_company_columns(self):
        row = SignedTermRow.model_validate({
            "id": 1, "termoId": 9, "empresaId": 7, "empresa_id": "uuid-7", "estudanteId": 3
        })

        assert row.termo_id == 9
        assert row.empresa_id_camel == 7
        assert row.empresa_id == "uuid-7"
        assert row.estudante_id == 3


class TestCommitmentTerm:
    def test_dates_and_amounts(self):
        row = CommitmentTermRow.model_validate({
            "co_seq_termo": 42,
            "data_inicio": datetime(2024, 2, 1, 0, 0),
            "data_fim": "2024-12-01",
            "valor_estagio": "1200.50",
        })

        assert row.data_inicio == date(2024, 2, 1)
        assert row.data_fim == date(2024, 12, 1)
        assert row.valor_estagio == Decimal("1200.50")
