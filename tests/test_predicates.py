"""Tests for the predicate library."""

from datetime import date, datetime, timezone

import numpy as np
import pytest

from fieldknobs import (
    BetweenDate,
    Coercer,
    ConfigurationError,
    IsAlphanumeric,
    IsEmail,
    IsISO8601,
    IsISO8601Date,
    IsOnlyDigits,
    IsPhone,
    IsUUID,
    Length,
    Max,
    MaxCount,
    MaxDate,
    MaxLength,
    Min,
    MinCount,
    MinDate,
    MinLength,
    Numeric,
    OneOf,
    Range,
    Required,
    Settings,
)


class TestRequired:
    """Test Required predicate."""

    def test_missing_values_fail(self):
        """Test None and empty text."""
        error = Required(None)("name")
        assert error.tag == "required"
        assert error.message == "name is required"
        assert error.value is None

        assert Required("")("name").tag == "required"

    def test_present_values_pass(self):
        """Test present values, including empty structures."""
        assert Required("x")("name") is None
        assert Required(0)("name") is None
        assert Required([])("name") is None
        assert Required({"a": 1})("name") is None


class TestNumericPredicates:
    """Test Min, Max and Range."""

    def test_min(self):
        """Test inclusive minimum."""
        assert Min(5, 5)("age") is None
        error = Min(4, 5)("age")
        assert error.tag == "min"
        assert error.message == "age must be at least 5"
        assert error.value == 4
        assert error.param("min") == 5

    def test_max(self):
        """Test inclusive maximum."""
        assert Max(10, 10)("age") is None
        error = Max(11, 10)("age")
        assert error.tag == "max"
        assert error.param("max") == 10

    def test_range(self):
        """Test inclusive range."""
        assert Range(5, 5, 10)("age") is None
        assert Range(10, 5, 10)("age") is None
        error = Range(11, 5, 10)("age")
        assert error.tag == "range"
        assert error.message == "age must be between 5 and 10"
        assert dict(error.params) == {"min": 5, "max": 10}
        assert Range(4, 5, 10)("age").tag == "range"

    def test_mixed_widths(self):
        """Test numpy and float values compare by value."""
        assert Min(np.uint8(200), 100)("n") is None
        assert Max(2.5, 2)("n").tag == "max"
        assert Min(float("nan"), 0)("n").tag == "min"

    def test_wrong_domain(self):
        """Test non-numeric values report invalid_type instead of raising."""
        error = Min("6", 5)("age")
        assert error.tag == "invalid_type"
        assert error.param("actual") == "str"


class TestLengthPredicates:
    """Test MinLength, MaxLength and Length."""

    def test_min_length(self):
        """Test inclusive minimum length."""
        assert MinLength("abc", 3)("name") is None
        error = MinLength("ab", 3)("name")
        assert error.tag == "min_length"
        assert error.message == "name must be at least 3 characters long"
        assert error.param("min") == 3

    def test_max_length(self):
        """Test inclusive maximum length."""
        assert MaxLength("abc", 3)("name") is None
        assert MaxLength("abcd", 3)("name").tag == "max_length"

    def test_length(self):
        """Test inclusive length range."""
        assert Length("abc", 3, 5)("name") is None
        assert Length("abcde", 3, 5)("name") is None
        assert Length("ab", 3, 5)("name").tag == "length"
        assert Length("abcdef", 3, 5)("name").tag == "length"

    def test_counts_code_points(self):
        """Test multi-byte characters count once."""
        assert MaxLength("héllo", 5)("name") is None
        assert MinLength("日本", 2)("name") is None

    def test_wrong_domain(self):
        """Test non-text values."""
        assert MinLength(123, 1)("name").tag == "invalid_type"


class TestOneOf:
    """Test OneOf predicate."""

    def test_member(self):
        """Test allowed values."""
        assert OneOf("b", "a", "b")("letter") is None

    def test_non_member(self):
        """Test disallowed values."""
        error = OneOf("c", "a", "b")("letter")
        assert error.tag == "one_of"
        assert error.message == "letter is not in the collection"
        assert error.param("collection") == ["a", "b"]

    def test_exact_match(self):
        """Test that matching is case sensitive."""
        assert OneOf("A", "a")("letter").tag == "one_of"

    def test_empty_allowlist_fails(self):
        """Test an empty allowlist never passes."""
        assert OneOf("x")("letter").tag == "one_of"


class TestFormatPredicates:
    """Test text format predicates."""

    @pytest.mark.parametrize(
        "value",
        [
            "a@b.com",
            "email@domain.com",
            "first.last+tag@mailbox.org",
            "Jane Doe <jane@company.com>",
            "another@email",
        ],
    )
    def test_valid_email(self, value):
        """Test valid mailbox addresses."""
        assert IsEmail(value)("email") is None

    @pytest.mark.parametrize("value", ["abc", "", "@company.com", "a@", "a b@c.com", "a@b.com junk"])
    def test_invalid_email(self, value):
        """Test invalid mailbox addresses."""
        error = IsEmail(value)("email")
        assert error.tag == "is_email"
        assert error.message == "email is not a valid email address"

    def test_alphanumeric(self):
        """Test alphanumeric text."""
        assert IsAlphanumeric("test123")("f") is None
        assert IsAlphanumeric("test 123")("f").tag == "is_alphanumeric"
        assert IsAlphanumeric("")("f").tag == "is_alphanumeric"
        assert IsAlphanumeric("tést")("f").tag == "is_alphanumeric"
        assert IsAlphanumeric("abc\n")("f").tag == "is_alphanumeric"

    def test_iso8601(self):
        """Test full timestamps."""
        assert IsISO8601("2014-01-01T00:00:00Z")("f") is None
        assert IsISO8601("2014-01-01T00:00:00+07:00")("f") is None
        assert IsISO8601("2014-01-01")("f").tag == "is_iso8601"
        assert IsISO8601("2014-01-01T00:00:00Z\n")("f").tag == "is_iso8601"

    def test_iso8601_date(self):
        """Test date-only values."""
        assert IsISO8601Date("2014-01-01")("f") is None
        assert IsISO8601Date("2014-01-01T00:00:00Z")("f").tag == "is_iso8601_date"
        assert IsISO8601Date("2014-1-1")("f").tag == "is_iso8601_date"
        assert IsISO8601Date("2014-02-30")("f").tag == "is_iso8601_date"

    def test_phone(self):
        """Test phone numbers."""
        assert IsPhone("1234567890")("f") is None
        assert IsPhone("+6281234567")("f") is None
        assert IsPhone("+")("f").tag == "is_phone"
        assert IsPhone("123-456")("f").tag == "is_phone"
        assert IsPhone("++123")("f").tag == "is_phone"

    def test_uuid(self):
        """Test UUIDs."""
        assert IsUUID("6ba7b810-9dad-11d1-80b4-00c04fd430c8")("f") is None
        assert IsUUID("6BA7B810-9DAD-11D1-80B4-00C04FD430C8")("f") is None
        assert IsUUID("urn:uuid:6ba7b810-9dad-11d1-80b4-00c04fd430c8")("f") is None
        error = IsUUID("not-a-uuid")("f")
        assert error.tag == "is_uuid"
        assert error.message == "f is not a valid UUID"

    def test_only_digits(self):
        """Test digit-only text."""
        assert IsOnlyDigits("1234567890")("f") is None
        assert IsOnlyDigits("-1")("f").tag == "is_only_digits"
        assert IsOnlyDigits("1.0")("f").tag == "is_only_digits"
        assert IsOnlyDigits("")("f").tag == "is_only_digits"


class TestDatePredicates:
    """Test MinDate, MaxDate and BetweenDate."""

    low = datetime(2020, 1, 1, tzinfo=timezone.utc)
    high = datetime(2020, 12, 31, tzinfo=timezone.utc)

    def test_min_date(self):
        """Test inclusive lower bound."""
        assert MinDate(self.low, self.low)("d") is None
        error = MinDate(datetime(2019, 12, 31, tzinfo=timezone.utc), self.low)("d")
        assert error.tag == "min_date"
        assert error.param("min_date") == self.low

    def test_max_date(self):
        """Test inclusive upper bound."""
        assert MaxDate(self.high, self.high)("d") is None
        assert MaxDate(datetime(2021, 1, 1, tzinfo=timezone.utc), self.high)("d").tag == "max_date"

    def test_between_date(self):
        """Test inclusive range."""
        assert BetweenDate(self.low, self.low, self.high)("d") is None
        assert BetweenDate(self.high, self.low, self.high)("d") is None
        error = BetweenDate(datetime(2021, 6, 1), self.low, self.high)("d")
        assert error.tag == "between_date"
        assert set(error.params) == {"min_date", "max_date"}

    def test_naive_and_aware_compare(self):
        """Test naive values and date bounds are compared as UTC."""
        assert MinDate(datetime(2020, 6, 1), date(2020, 1, 1))("d") is None
        assert MaxDate(datetime(2020, 6, 1, 12), self.high)("d") is None

    def test_invalid_bound_raises(self):
        """Test unparseable bounds are a configuration error."""
        with pytest.raises(ConfigurationError):
            MinDate(self.low, "not a date")

    def test_wrong_domain(self):
        """Test non-timestamp values."""
        assert MinDate(42, self.low)("d").tag == "invalid_type"

    def test_text_parsed_with_given_coercer(self):
        """Test that text values and bounds use the supplied coercer's layouts."""
        coercer = Coercer(Settings(timestamp_layouts=("%d.%m.%Y",)))
        assert MinDate("02.01.2020", "01.01.2020", coercer)("d") is None
        assert MaxDate("02.01.2020", "01.01.2020", coercer=coercer)("d").tag == "max_date"
        assert BetweenDate("15.06.2020", "01.01.2020", "31.12.2020", coercer)("d") is None
        with pytest.raises(ConfigurationError):
            MinDate("02.01.2020", "01.01.2020")

    def test_coercer_not_part_of_equality(self):
        """Test that predicates compare by value and bounds only."""
        coercer = Coercer()
        assert MinDate(self.low, self.low, coercer) == MinDate(self.low, self.low)


class TestCountPredicates:
    """Test MinCount and MaxCount."""

    def test_min_count(self):
        """Test inclusive minimum count."""
        assert MinCount([1, 2], 2)("tags") is None
        error = MinCount([1], 2)("tags")
        assert error.tag == "min_count"
        assert error.message == "tags must have at least 2 items"
        assert error.param("min_count") == 2

    def test_max_count(self):
        """Test inclusive maximum count."""
        assert MaxCount({"a": 1, "b": 2}, 2)("tags") is None
        assert MaxCount({1, 2, 3}, 2)("tags").tag == "max_count"

    def test_non_container_fails(self):
        """Test that non-containers fail with the count tag."""
        error = MinCount(5, 1)("tags")
        assert error.tag == "min_count"
        assert error.message == "tags must be a list, set or mapping"
        assert MaxCount("abc", 10)("tags").tag == "max_count"


class TestNumeric:
    """Test Numeric predicate."""

    def test_numbers_pass(self):
        """Test numbers of any width."""
        for value in (1, -1, 1.5, np.int32(1), np.uint64(1), np.float16(1)):
            assert Numeric(value)("n") is None

    def test_non_numbers_fail(self):
        """Test text and booleans."""
        error = Numeric("5")("n")
        assert error.tag == "invalid_type"
        assert error.message == "n must be a number"
        assert error.param("actual") == "str"
        assert Numeric(True)("n").tag == "invalid_type"


class TestPredicateObjects:
    """Test predicates as immutable value objects."""

    def test_immutable(self):
        """Test predicates cannot be modified."""
        predicate = Min(4, 5)
        with pytest.raises(AttributeError):
            predicate.min = 1

    def test_reusable(self):
        """Test a predicate can be evaluated for several fields."""
        predicate = Required("")
        assert predicate("a").field == "a"
        assert predicate("b").field == "b"
