"""
Pydantic schemas for API requests and responses
"""

from pydantic import BaseModel, Field

from ..registry import Bank, Customer, KycRequest


# Bank schemas
class AddBankRequest(BaseModel):
    name: str
    identity: str = Field(..., min_length=1)
    reg_number: str


class VotingEligibilityRequest(BaseModel):
    eligible: bool


class ReportBankRequest(BaseModel):
    reported_name: str = Field(..., description="Free text carried in the BankReported event")


class BankModel(BaseModel):
    identity: str
    name: str
    reg_number: str
    complaints_reported: int
    kyc_count: int
    eligible_to_vote: bool

    @classmethod
    def from_bank(cls, bank: Bank) -> 'BankModel':
        return cls(
            identity=bank.identity,
            name=bank.name,
            reg_number=bank.reg_number,
            complaints_reported=bank.complaints_reported,
            kyc_count=bank.kyc_count,
            eligible_to_vote=bank.eligible_to_vote
        )


# Customer schemas
class RegisterCustomerRequest(BaseModel):
    user_name: str = Field(..., min_length=1)
    data: str


class AmendCustomerRequest(BaseModel):
    data: str


class CustomerModel(BaseModel):
    user_name: str
    data: str
    bank: str
    verified: bool
    upvotes: int
    downvotes: int

    @classmethod
    def from_customer(cls, customer: Customer) -> 'CustomerModel':
        return cls(
            user_name=customer.user_name,
            data=customer.data,
            bank=customer.bank,
            verified=customer.verified,
            upvotes=customer.upvotes,
            downvotes=customer.downvotes
        )


# Request schemas
class FileRequestRequest(BaseModel):
    user_name: str = Field(..., min_length=1)
    data: str


class KycRequestModel(BaseModel):
    user_name: str
    bank: str
    data: str

    @classmethod
    def from_request(cls, request: KycRequest) -> 'KycRequestModel':
        return cls(user_name=request.user_name, bank=request.bank, data=request.data)


class ErrorResponse(BaseModel):
    error: str
    detail: str
