"""ScholarPay: scholarship applications paid out through a natural-language payment provider."""
