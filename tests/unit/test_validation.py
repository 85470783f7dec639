"""
Batch metadata and quantity validation.
"""

import pytest

from provenance_kernel.domain.validation import (
    MAX_CERTIFICATION_LENGTH,
    MAX_CERTIFICATIONS,
    MAX_ORIGIN_LENGTH,
    MAX_QUANTITY,
    is_storable_batch_id,
    validate_certification,
    validate_certifications,
    validate_harvest_date,
    validate_merged_quantity,
    validate_origin,
    validate_quantity,
    validate_split_quantity,
)
from provenance_kernel.exceptions import (
    CertificationCapacityError,
    InsufficientQuantityError,
    InvalidMetadataError,
    QuantityOverflowError,
)


class TestQuantity:
    @pytest.mark.parametrize("quantity", [0, -1, -1000])
    def test_non_positive_rejected(self, quantity):
        with pytest.raises(InsufficientQuantityError) as exc_info:
            validate_quantity(quantity)
        assert exc_info.value.quantity == quantity

    def test_positive_accepted(self):
        validate_quantity(1)
        validate_quantity(10**15)

    @pytest.mark.parametrize("value", [1.5, "10", True, None])
    def test_non_integer_rejected(self, value):
        with pytest.raises(InsufficientQuantityError) as exc_info:
            validate_quantity(value)
        assert exc_info.value.code == "INSUFFICIENT_QUANTITY"

    def test_upper_bound(self):
        validate_quantity(MAX_QUANTITY)
        with pytest.raises(QuantityOverflowError) as exc_info:
            validate_quantity(MAX_QUANTITY + 1)
        assert exc_info.value.limit == MAX_QUANTITY

    def test_merged_sum_bounded(self):
        assert validate_merged_quantity(60, 50) == 110
        assert validate_merged_quantity(MAX_QUANTITY - 1, 1) == MAX_QUANTITY
        with pytest.raises(QuantityOverflowError):
            validate_merged_quantity(MAX_QUANTITY, 1)


class TestSplitQuantity:
    def test_strictly_inside_bounds(self):
        validate_split_quantity(1, 2)
        validate_split_quantity(99, 100)

    @pytest.mark.parametrize("split", [0, -5, 100, 101])
    def test_out_of_bounds(self, split):
        with pytest.raises(InsufficientQuantityError) as exc_info:
            validate_split_quantity(split, 100)
        assert exc_info.value.available == 100

    @pytest.mark.parametrize("split", [2.5, "40", None, False])
    def test_non_integer_rejected(self, split):
        with pytest.raises(InsufficientQuantityError):
            validate_split_quantity(split, 100)

    def test_batch_of_one_cannot_split(self):
        with pytest.raises(InsufficientQuantityError):
            validate_split_quantity(1, 1)


class TestOrigin:
    def test_empty_rejected(self):
        with pytest.raises(InvalidMetadataError) as exc_info:
            validate_origin("")
        assert exc_info.value.field == "origin"

    def test_boundary_length(self):
        validate_origin("x" * MAX_ORIGIN_LENGTH)
        with pytest.raises(InvalidMetadataError):
            validate_origin("x" * (MAX_ORIGIN_LENGTH + 1))


class TestCertifications:
    def test_token_boundary_length(self):
        validate_certification("c" * MAX_CERTIFICATION_LENGTH)
        with pytest.raises(InvalidMetadataError):
            validate_certification("c" * (MAX_CERTIFICATION_LENGTH + 1))

    def test_empty_token_rejected(self):
        with pytest.raises(InvalidMetadataError):
            validate_certifications(["CertA", ""])

    def test_capacity(self):
        validate_certifications([f"C{i}" for i in range(MAX_CERTIFICATIONS)])
        with pytest.raises(CertificationCapacityError) as exc_info:
            validate_certifications([f"C{i}" for i in range(MAX_CERTIFICATIONS + 1)])
        assert exc_info.value.limit == MAX_CERTIFICATIONS
        assert exc_info.value.numeric_code == 111

    def test_bare_string_rejected(self):
        with pytest.raises(InvalidMetadataError):
            validate_certifications("CertA")

    @pytest.mark.parametrize("value", [5, None])
    def test_non_sequence_rejected(self, value):
        with pytest.raises(InvalidMetadataError):
            validate_certifications(value)

    def test_empty_sequence_accepted(self):
        validate_certifications(())


class TestHarvestDate:
    def test_non_negative_integers_accepted(self):
        validate_harvest_date(0)
        validate_harvest_date(123456)

    @pytest.mark.parametrize("value", ["2024-01-01", 1.0, None, True, -1, 2**63])
    def test_malformed_rejected(self, value):
        with pytest.raises(InvalidMetadataError) as exc_info:
            validate_harvest_date(value)
        assert exc_info.value.field == "harvest_date"


@pytest.mark.parametrize(
    "batch_id, storable",
    [(1, True), (2**63 - 1, True), (0, False), (-1, False), (2**63, False), ("1", False), (1.0, False)],
)
def test_storable_batch_id(batch_id, storable):
    assert is_storable_batch_id(batch_id) is storable
