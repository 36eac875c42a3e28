"""
Tests for AffiliateSetting normalization.

Covers:
- Defaults
- Loose input coercion (strings, numbers)
- Clamping of rate, confirm days and minimum amount
- Withdraw channel whitelist normalization
- Storage round trip shape
"""

from decimal import Decimal

from affiliate.config.affiliate_setting import (
    AffiliateSetting,
    normalize_channels,
    parse_loose_bool,
)


class TestDefaults:
    """Default configuration."""

    def test_defaults_disable_program(self):
        """Empty setting is a disabled program with zero values."""
        setting = AffiliateSetting()

        assert setting.enabled is False
        assert setting.commission_rate == Decimal("0.00")
        assert setting.confirm_days == 0
        assert setting.min_withdraw_amount == Decimal("0.00")
        assert setting.withdraw_channels == ()

    def test_from_storage_non_dict_yields_defaults(self):
        """Corrupted documents fall back to defaults."""
        assert AffiliateSetting.from_storage(["enabled"]) == AffiliateSetting()
        assert AffiliateSetting.from_storage(None) == AffiliateSetting()

    def test_from_storage_ignores_unknown_keys(self):
        """Unknown keys are dropped."""
        setting = AffiliateSetting.from_storage({"enabled": True, "legacy": 1})

        assert setting.enabled is True


class TestCoercion:
    """Loose input parsing."""

    def test_enabled_from_strings(self):
        """Common truthy/falsy spellings are understood."""
        assert AffiliateSetting(enabled="true").enabled is True
        assert AffiliateSetting(enabled="1").enabled is True
        assert AffiliateSetting(enabled="off").enabled is False
        assert AffiliateSetting(enabled="garbage").enabled is False

    def test_parse_loose_bool_numbers(self):
        """Non-zero numbers are true."""
        assert parse_loose_bool(1) is True
        assert parse_loose_bool(0) is False
        assert parse_loose_bool(None) is False

    def test_rate_from_numeric_string(self):
        """Numeric strings become rounded Decimals."""
        setting = AffiliateSetting(commission_rate="12.345")

        assert setting.commission_rate == Decimal("12.35")

    def test_rate_from_float(self):
        """Floats go through their decimal repr."""
        setting = AffiliateSetting(commission_rate=0.1)

        assert setting.commission_rate == Decimal("0.10")

    def test_unparseable_rate_falls_back(self):
        """Garbage falls back to the default rate."""
        setting = AffiliateSetting(commission_rate="ten percent")

        assert setting.commission_rate == Decimal("0.00")

    def test_confirm_days_from_string(self):
        """Integer strings are parsed."""
        assert AffiliateSetting(confirm_days="7").confirm_days == 7
        assert AffiliateSetting(confirm_days="abc").confirm_days == 0


class TestClamping:
    """Bounds enforcement."""

    def test_rate_clamped_to_range(self):
        """Rate stays within 0-100."""
        assert AffiliateSetting(commission_rate="150").commission_rate == Decimal("100.00")
        assert AffiliateSetting(commission_rate="-5").commission_rate == Decimal("0.00")

    def test_confirm_days_clamped(self):
        """Confirm days stay within 0-3650."""
        assert AffiliateSetting(confirm_days=10000).confirm_days == 3650
        assert AffiliateSetting(confirm_days=-3).confirm_days == 0

    def test_min_withdraw_not_negative(self):
        """Minimum withdrawal is floored at zero."""
        setting = AffiliateSetting(min_withdraw_amount="-10")

        assert setting.min_withdraw_amount == Decimal("0.00")

    def test_huge_amounts_fall_back_to_defaults(self):
        """Values too large for a money column read as the defaults."""
        setting = AffiliateSetting.from_storage(
            {"enabled": True, "commission_rate": "1e40", "min_withdraw_amount": "1e30"}
        )

        assert setting.enabled is True
        assert setting.commission_rate == Decimal("0.00")
        assert setting.min_withdraw_amount == Decimal("0.00")


class TestWithdrawChannels:
    """Channel whitelist normalization."""

    def test_trim_and_dedupe_case_insensitive(self):
        """First spelling wins; blanks are dropped."""
        channels = normalize_channels([" Alipay ", "alipay", "", "  ", "USDT"])

        assert channels == ("Alipay", "USDT")

    def test_long_entries_truncated(self):
        """Entries are cut to 50 characters."""
        channels = normalize_channels(["x" * 80])

        assert channels == ("x" * 50,)

    def test_at_most_twenty_entries(self):
        """Whitelist is capped at 20 entries."""
        channels = normalize_channels([f"ch{i}" for i in range(30)])

        assert len(channels) == 20
        assert channels[-1] == "ch19"

    def test_non_list_yields_empty(self):
        """A plain string is not a list of channels."""
        assert normalize_channels("alipay") == ()
        assert normalize_channels(42) == ()

    def test_allows_channel(self):
        """Whitelist check ignores case; empty whitelist allows anything."""
        setting = AffiliateSetting(withdraw_channels=["Alipay"])

        assert setting.allows_channel(" ALIPAY ") is True
        assert setting.allows_channel("bank") is False
        assert AffiliateSetting().allows_channel("bank") is True


class TestStorage:
    """Serialization to the settings document."""

    def test_to_storage_uses_strings_for_money(self):
        """Money values never become floats."""
        setting = AffiliateSetting(
            enabled=True,
            commission_rate="10",
            min_withdraw_amount="5.5",
            withdraw_channels=["bank"],
        )

        stored = setting.to_storage()

        assert stored == {
            "enabled": True,
            "commission_rate": "10.00",
            "confirm_days": 0,
            "min_withdraw_amount": "5.50",
            "withdraw_channels": ["bank"],
        }
        assert AffiliateSetting.from_storage(stored) == setting
