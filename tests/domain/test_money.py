from decimal import Decimal

from orderdesk.money import format_inr, gst_on, to_major, to_paise


class TestRupeeFormatting:
    def test_small_amount(self):
        assert format_inr(12550) == "₹125.50"

    def test_thousands(self):
        assert format_inr(110000) == "₹1,100.00"

    def test_lakhs_use_indian_grouping(self):
        assert format_inr(123456700) == "₹12,34,567.00"

    def test_zero(self):
        assert format_inr(0) == "₹0.00"

    def test_negative(self):
        assert format_inr(-5000) == "-₹50.00"


class TestConversions:
    def test_to_paise_from_string(self):
        assert to_paise("125.50") == 12550

    def test_to_paise_from_float(self):
        assert to_paise(0.1) == 10

    def test_to_major(self):
        assert to_major(12550) == Decimal("125.50")


class TestGst:
    def test_five_percent(self):
        assert gst_on(100000) == 5000

    def test_half_paisa_rounds_up(self):
        assert gst_on(10) == 1

    def test_below_half_rounds_down(self):
        assert gst_on(8) == 0
