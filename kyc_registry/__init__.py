"""
KYC Registry

A permissioned registry in which member banks attest to the KYC status of
customers by voting, under a single administrator who controls membership.
"""

__version__ = "1.0.0"
