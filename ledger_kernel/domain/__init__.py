"""
Pure domain layer: value objects, the balance formula, the voucher state
machine and scope resolution.  Nothing here touches the database.
"""
