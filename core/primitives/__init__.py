"""
GuestDesk Core Primitives - Typed building blocks
=================================================
Pure Python, no Django dependency, frozen dataclasses.

Primitives:
    money  - Decimal coercion and en-IN rupee formatting
    stay   - Booking, ledger, activity, payment, arrival and stay records
             validated at the data-access boundary
"""
