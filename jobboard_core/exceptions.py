"""
Error kinds raised by the contract, milestone and dispute services.

Each one is a DRF APIException, so views let them propagate and the
framework renders them as {"detail": ...} with the matching status code.
"""
from rest_framework import status
from rest_framework.exceptions import APIException


class NotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'The requested resource does not exist.'
    default_code = 'not_found'


class Forbidden(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'You are not a party entitled to perform this action.'
    default_code = 'forbidden'


class InvalidTransition(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'This transition is not allowed from the current state.'
    default_code = 'invalid_transition'


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'The request conflicts with the current state.'
    default_code = 'conflict'


class ContractLocked(APIException):
    status_code = status.HTTP_423_LOCKED
    default_detail = 'This contract is disputed or closed and cannot be changed.'
    default_code = 'contract_locked'


class InsufficientFunds(APIException):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_detail = 'Insufficient wallet balance.'
    default_code = 'insufficient_funds'
