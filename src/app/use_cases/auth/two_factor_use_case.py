"""
Two-Factor Enrollment Use Case

Setup stores a new secret in the pending slot only; confirmation promotes
it to active. A failed confirmation keeps the pending secret for retries.
"""

from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.security_audit import ClientInfo, record_security_event
from src.app.services.totp import new_secret, provisioning_uri, verify_code
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import SecurityEventType, SecurityOutcome
from .dtos import MessageResponse, TwoFactorSetupResponse, TwoFactorStatusResponse


class TwoFactorEnrollmentUseCase:
    def __init__(self, uow: UnitOfWork, issuer: str = "Storefront"):
        self.uow = uow
        self.issuer = issuer

    async def setup(self, user_id: UUID, client: ClientInfo) -> Result[TwoFactorSetupResponse]:
        """
        Generate a new secret and its provisioning URI.

        Errors:
            - USER_NOT_FOUND
            - TWO_FACTOR_ALREADY_ENABLED: disable first to re-enroll
        """
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            if user.has_two_factor:
                return Return.err(
                    Error("TWO_FACTOR_ALREADY_ENABLED", "Two-factor authentication is already enabled")
                )

            secret = new_secret()
            user.pending_two_factor_secret = secret
            await self.uow.users.update(user)

            await record_security_event(
                self.uow,
                SecurityEventType.two_factor_setup,
                SecurityOutcome.success,
                client=client,
                user_id=user.id,
            )
            await self.uow.commit()

            return Return.ok(
                TwoFactorSetupResponse(
                    secret=secret,
                    provisioning_uri=provisioning_uri(secret, user.email, self.issuer),
                )
            )

    async def confirm(self, user_id: UUID, code: str, client: ClientInfo) -> Result[MessageResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            if not user.pending_two_factor_secret:
                return Return.err(
                    Error("TWO_FACTOR_NOT_PENDING", "Two-factor setup has not been started")
                )

            if not verify_code(user.pending_two_factor_secret, code):
                await record_security_event(
                    self.uow,
                    SecurityEventType.two_factor_failure,
                    SecurityOutcome.failure,
                    client=client,
                    user_id=user.id,
                    details={"reason": "confirm_wrong_code"},
                )
                await self.uow.commit()
                return Return.err(Error("INVALID_TWO_FACTOR", "Invalid or expired two-factor code"))

            user.two_factor_secret = user.pending_two_factor_secret
            user.pending_two_factor_secret = None
            await self.uow.users.update(user)

            await record_security_event(
                self.uow,
                SecurityEventType.two_factor_enabled,
                SecurityOutcome.success,
                client=client,
                user_id=user.id,
            )
            await self.uow.commit()

            return Return.ok(
                MessageResponse(status="enabled", message="Two-factor authentication enabled")
            )

    async def disable(self, user_id: UUID, code: str, client: ClientInfo) -> Result[MessageResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            if not user.has_two_factor:
                return Return.err(
                    Error("TWO_FACTOR_NOT_ENABLED", "Two-factor authentication is not enabled")
                )

            if not verify_code(user.two_factor_secret, code):
                await record_security_event(
                    self.uow,
                    SecurityEventType.two_factor_failure,
                    SecurityOutcome.failure,
                    client=client,
                    user_id=user.id,
                    details={"reason": "disable_wrong_code"},
                )
                await self.uow.commit()
                return Return.err(Error("INVALID_TWO_FACTOR", "Invalid or expired two-factor code"))

            user.two_factor_secret = None
            user.pending_two_factor_secret = None
            await self.uow.users.update(user)

            await record_security_event(
                self.uow,
                SecurityEventType.two_factor_disabled,
                SecurityOutcome.success,
                client=client,
                user_id=user.id,
            )
            await self.uow.commit()

            return Return.ok(
                MessageResponse(status="disabled", message="Two-factor authentication disabled")
            )

    async def status(self, user_id: UUID) -> Result[TwoFactorStatusResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))
            return Return.ok(
                TwoFactorStatusResponse(
                    enabled=user.has_two_factor,
                    pending_setup=bool(user.pending_two_factor_secret),
                )
            )
