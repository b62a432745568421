"""Tests for CPF / CNPJ masking and checksums."""

import pytest

from src.pipeline.identifiers import (
    detect_kind,
    digits_only,
    format_identifier,
    mask_cnpj,
    mask_cpf,
    validate_cnpj,
    validate_cpf,
    validate_identifier,
)
from src.pipeline.models import IdentifierKind

VALID_CPF = "529.982.247-25"
VALID_CNPJ = "11.222.333/0001-81"


class TestChecksums:
    def test_valid_cpf(self):
        assert validate_cpf(VALID_CPF)
        assert validate_cpf("52998224725")

    def test_wrong_check_digit_cpf(self):
        assert not validate_cpf("52998224726")

    def test_repeated_digits_rejected(self):
        assert not validate_cpf("111.111.111-11")
        assert not validate_cnpj("00000000000000")

    def test_valid_cnpj(self):
        assert validate_cnpj(VALID_CNPJ)

    def test_wrong_check_digit_cnpj(self):
        assert not validate_cnpj("11222333000182")

    def test_wrong_length(self):
        assert not validate_cpf("5299822472")
        assert not validate_cnpj("1122233300018")


class TestValidateIdentifier:
    def test_auto_detects_cpf(self):
        assert validate_identifier(VALID_CPF)

    def test_auto_detects_cnpj(self):
        assert validate_identifier(VALID_CNPJ)

    def test_auto_rejects_other_lengths(self):
        assert not validate_identifier("529982247251")

    def test_empty_is_invalid(self):
        assert not validate_identifier("")
        assert not validate_identifier("--")

    def test_explicit_kind_mismatch(self):
        assert not validate_identifier(VALID_CNPJ, IdentifierKind.CPF)
        assert not validate_identifier(VALID_CPF, IdentifierKind.CNPJ)

    def test_detect_kind(self):
        assert detect_kind(VALID_CPF) is IdentifierKind.CPF
        assert detect_kind(VALID_CNPJ) is IdentifierKind.CNPJ
        assert detect_kind("123") is None


class TestMasking:
    def test_digits_only(self):
        assert digits_only("529.982.247-25") == "52998224725"
        assert digits_only(None) == ""

    def test_full_cpf(self):
        assert mask_cpf("52998224725") == VALID_CPF

    @pytest.mark.parametrize(
        "raw,expected",
        [("529", "529"), ("5299", "529.9"), ("5299822", "529.982.2")],
    )
    def test_partial_cpf(self, raw, expected):
        assert mask_cpf(raw) == expected

    def test_full_cnpj(self):
        assert mask_cnpj("11222333000181") == VALID_CNPJ

    def test_partial_cnpj(self):
        assert mask_cnpj("112223330") == "11.222.333/0"

    def test_extra_digits_truncated(self):
        assert mask_cpf("5299822472599") == VALID_CPF

    def test_auto_switches_to_cnpj_past_eleven_digits(self):
        assert format_identifier("52998224725") == VALID_CPF
        assert format_identifier("529982247251") == "52.998.224/7251"

    def test_explicit_kind(self):
        assert format_identifier("11222333000181", IdentifierKind.CNPJ) == VALID_CNPJ
        assert format_identifier("1122", IdentifierKind.CNPJ) == "11.22"

    def test_no_digits(self):
        assert format_identifier("abc") == ""
