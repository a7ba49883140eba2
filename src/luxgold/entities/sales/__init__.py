"""Sales entities: coupons and orders."""
