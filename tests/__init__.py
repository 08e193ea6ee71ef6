"""
Test suite for the energy grid ledger

Contains:
- tests/unit/          : Unit tests for individual modules and the EnergyGrid facade
"""
