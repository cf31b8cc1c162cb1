"""Student profile completion."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.identity.core.exceptions import NotFoundError
from src.identity.core.logging import get_logger
from src.identity.core.security import Principal, authorize
from src.identity.models import Role, StudentProfile
from src.identity.models.base import utc_now
from src.identity.repositories import AuthUserRepository, StudentProfileRepository
from src.identity.schemas import StudentProfileUpdate

logger = get_logger(__name__)


class StudentService:
    def __init__(
        self,
        user_repo: AuthUserRepository,
        student_repo: StudentProfileRepository,
        session: AsyncSession,
    ):
        self.user_repo = user_repo
        self.student_repo = student_repo
        self.session = session

    async def update_profile(
        self, principal: Principal, data: StudentProfileUpdate
    ) -> StudentProfile:
        """Apply the supplied fields.

        Once both names are present the profile counts as complete and the
        account becomes verified.
        """
        authorize(principal, [Role.STUDENT])
        try:
            user = await self.user_repo.get_by_id(principal.user_id)
            if user is None:
                raise NotFoundError("User not found")

            profile = await self.student_repo.get_by_user_id(user.id)
            if profile is None:
                profile = StudentProfile(auth_user_id=user.id)
                self.student_repo.add(profile)

            # JSON mode turns enums and URLs into plain column values
            updates = data.model_dump(exclude_unset=True, mode="json")
            if "dob" in updates:
                updates["dob"] = data.dob
            for field, value in updates.items():
                setattr(profile, field, value)

            now = utc_now()
            profile.updated_at = now
            if profile.first_name and profile.last_name:
                profile.is_profile_completed = True
                if not user.account_verified:
                    user.account_verified = True
                    user.updated_at = now
                    self.session.add(user)

            self.session.add(profile)
            await self.session.commit()
        except NotFoundError:
            await self.session.rollback()
            raise
        except Exception as e:
            await self.session.rollback()
            logger.error("Failed to update student profile", error=str(e))
            raise

        logger.info("Student profile updated", user_id=str(user.id))
        return profile
