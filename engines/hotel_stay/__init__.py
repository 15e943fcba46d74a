"""
BOS Hotel Stay Engine
=====================
Engine: hotel_stay
Scope:  Room availability (overlap checking), room status machine,
        booking / room-assignment lifecycle, payment ledger and tax,
        checkout with grace period and late fees, room transfers.

Pure modules (overlap, room_states, booking_states, ledger, checkout,
transfer_rules) import without a database. The service facade lives
in engines.hotel_stay.services.
"""
