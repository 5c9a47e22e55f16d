"""
YourTales Backend - Manuscript Service (Manuscripts & Collaboration)
=====================================================================

What:  Manuscript CRUD, dashboard statistics, and the invite/respond
       collaboration workflow.
Who:   Called by routes/manuscripts.py. ChapterService reuses
       load_with_collaborations() for its own permission checks.

Permission rules (see services/permissions.py):
    update          author or ACCEPTED EDITOR collaborator
    delete, invite  author only
    respond         the invitee (matching email or user id)

Notification fan-out (best-effort, via NotificationService.notify):
    create                       → SYSTEM "Manuscript Created" to the caller
    update to PUBLISHED          → SYSTEM "Manuscript Published" to the caller
    invite (email has account)   → COLLABORATION "Collaboration Request" to the invitee
    respond                      → COLLABORATION "Invitation Accepted"/"Declined" to the author

Query plans:
    Author, collaborators and chapter counts are fetched with selectinload or
    one grouped COUNT query, never per-row lazy loads.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import case, delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from yourtales.exceptions import (
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
    YourTalesError,
)
from yourtales.models.chapter import Chapter
from yourtales.models.enums import (
    CollaborationStatus,
    ManuscriptStatus,
    NotificationType,
    UserRole,
)
from yourtales.models.manuscript import Collaboration, Manuscript
from yourtales.models.user import User
from yourtales.schemas.common import MessageResponse
from yourtales.schemas.manuscript import (
    CollaborationEnvelope,
    CollaborationResponse,
    DashboardStats,
    InviteRequest,
    ManuscriptCreate,
    ManuscriptDetail,
    ManuscriptDetailResponse,
    ManuscriptEnvelope,
    ManuscriptResponse,
    ManuscriptUpdate,
    MyManuscriptItem,
    MyManuscriptList,
    PublishedManuscriptItem,
    PublishedManuscriptList,
    StatsResponse,
)
from yourtales.services.notification_service import notification_service
from yourtales.services.permissions import can_edit, is_author, is_invitee
from yourtales.services.user_service import normalize_email

logger = logging.getLogger(__name__)


class ManuscriptService:
    """
    Business logic layer for manuscripts and collaborations.

    Error Handling Strategy:
        Same as the other services: our own exceptions propagate untouched,
        unexpected ones are logged and wrapped in DatabaseError.
    """

    # ══════════════════════════════════════════════════════════════════════
    # Reads
    # ══════════════════════════════════════════════════════════════════════

    async def list_published(self, db: AsyncSession) -> PublishedManuscriptList:
        """Published manuscripts, most recently updated first, with chapter counts."""
        try:
            result = await db.execute(
                select(Manuscript)
                .where(Manuscript.status == ManuscriptStatus.PUBLISHED)
                .options(selectinload(Manuscript.author))
                .order_by(Manuscript.updated_at.desc(), Manuscript.id.desc())
            )
            manuscripts = result.scalars().all()
            counts = await self._chapter_counts(db, [m.id for m in manuscripts])

            items = []
            for m in manuscripts:
                item = PublishedManuscriptItem.model_validate(m)
                item.chapter_count = counts.get(m.id, 0)
                items.append(item)
            return PublishedManuscriptList(manuscripts=items)
        except Exception as e:
            logger.error("Database error listing published manuscripts: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not retrieve manuscripts. Please try again.")

    async def list_for_user(self, db: AsyncSession, user: User) -> MyManuscriptList:
        """
        Manuscripts the user writes or collaborates on.

        A collaboration counts unless it was DECLINED; it is matched by user id
        or, for invitations sent before the account existed, by email.
        """
        try:
            collaborating = select(Collaboration.manuscript_id).where(
                or_(
                    Collaboration.user_id == user.id,
                    Collaboration.email == normalize_email(user.email),
                ),
                Collaboration.status != CollaborationStatus.DECLINED,
            )
            result = await db.execute(
                select(Manuscript)
                .where(
                    or_(
                        Manuscript.author_id == user.id,
                        Manuscript.id.in_(collaborating),
                    )
                )
                .options(
                    selectinload(Manuscript.author),
                    selectinload(Manuscript.collaborations),
                )
                .order_by(Manuscript.updated_at.desc(), Manuscript.id.desc())
            )
            return MyManuscriptList(
                manuscripts=[MyManuscriptItem.model_validate(m) for m in result.scalars().all()]
            )
        except Exception as e:
            logger.error("Database error listing manuscripts of user %s: %s", user.id, str(e))
            raise DatabaseError(message="Could not retrieve manuscripts. Please try again.")

    async def get_stats(self, db: AsyncSession, user: User) -> StatsResponse:
        """
        Totals over manuscripts the user authors or has ACCEPTED to work on.

        totalReads sums `reads`; totalEarnings sums `price`.
        """
        try:
            accepted = select(Collaboration.manuscript_id).where(
                Collaboration.user_id == user.id,
                Collaboration.status == CollaborationStatus.ACCEPTED,
            )
            published = func.coalesce(
                func.sum(case((Manuscript.status == ManuscriptStatus.PUBLISHED, 1), else_=0)), 0
            )
            result = await db.execute(
                select(
                    func.count(Manuscript.id),
                    published,
                    func.coalesce(func.sum(Manuscript.reads), 0),
                    func.coalesce(func.sum(Manuscript.price), 0.0),
                ).where(
                    or_(
                        Manuscript.author_id == user.id,
                        Manuscript.id.in_(accepted),
                    )
                )
            )
            total, published_count, reads, earnings = result.one()
            return StatsResponse(
                stats=DashboardStats(
                    total_manuscripts=total or 0,
                    published_books=published_count or 0,
                    total_reads=reads or 0,
                    total_earnings=float(earnings or 0),
                )
            )
        except Exception as e:
            logger.error("Database error computing stats for user %s: %s", user.id, str(e))
            raise DatabaseError(message="Error fetching stats")

    async def get_manuscript(self, db: AsyncSession, manuscript_id: int) -> ManuscriptDetailResponse:
        try:
            result = await db.execute(
                select(Manuscript)
                .where(Manuscript.id == manuscript_id)
                .options(
                    selectinload(Manuscript.author),
                    selectinload(Manuscript.collaborations).selectinload(Collaboration.user),
                )
            )
            manuscript = result.scalar_one_or_none()
            if manuscript is None:
                raise NotFoundError(resource="manuscript", resource_id=str(manuscript_id))
            return ManuscriptDetailResponse(manuscript=ManuscriptDetail.model_validate(manuscript))
        except YourTalesError:
            raise
        except Exception as e:
            logger.error("Database error fetching manuscript %s: %s", manuscript_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the manuscript. Please try again.",
                context={"manuscript_id": manuscript_id},
            )

    async def load_with_collaborations(
        self, db: AsyncSession, manuscript_id: int
    ) -> Manuscript:
        """Manuscript with collaborations loaded, for permission checks. 404 if missing."""
        result = await db.execute(
            select(Manuscript)
            .where(Manuscript.id == manuscript_id)
            .options(selectinload(Manuscript.collaborations))
        )
        manuscript = result.scalar_one_or_none()
        if manuscript is None:
            raise NotFoundError(resource="manuscript", resource_id=str(manuscript_id))
        return manuscript

    # ══════════════════════════════════════════════════════════════════════
    # Writes
    # ══════════════════════════════════════════════════════════════════════

    async def create_manuscript(
        self, db: AsyncSession, user: User, payload: ManuscriptCreate
    ) -> ManuscriptEnvelope:
        try:
            manuscript = Manuscript(
                title=payload.title,
                subtitle=payload.subtitle,
                genre=payload.genre,
                description=payload.description,
                tags=list(payload.tags),
                cover_url=payload.cover_url,
                author_id=user.id,
            )
            db.add(manuscript)
            await db.flush()
            logger.info("User %s created manuscript %s", user.id, manuscript.id)

            await notification_service.notify(
                db,
                recipient_id=user.id,
                type=NotificationType.SYSTEM,
                title="Manuscript Created",
                message=f'You created a new manuscript: "{manuscript.title}"',
                data={"manuscriptId": manuscript.id},
            )
            return ManuscriptEnvelope(
                message="Manuscript created successfully",
                manuscript=ManuscriptResponse.model_validate(manuscript),
            )
        except Exception as e:
            logger.error("Database error creating manuscript: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the manuscript. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def update_manuscript(
        self,
        db: AsyncSession,
        user: User,
        manuscript_id: int,
        payload: ManuscriptUpdate,
    ) -> ManuscriptEnvelope:
        manuscript = await self.load_with_collaborations(db, manuscript_id)
        if not can_edit(manuscript, user.id):
            raise PermissionDeniedError(
                "Permission denied",
                context={"manuscript_id": manuscript_id},
            )

        changes = payload.model_dump(exclude_unset=True)
        for required in ("title", "status", "tags", "price"):
            # Non-nullable columns: an explicit null means "leave as is"
            if required in changes and changes[required] is None:
                del changes[required]

        previous_status = manuscript.status
        try:
            for field, value in changes.items():
                setattr(manuscript, field, value)
            await db.flush()
        except Exception as e:
            logger.error("Database error updating manuscript %s: %s", manuscript_id, str(e))
            raise DatabaseError(context={"manuscript_id": manuscript_id})

        logger.info(
            "User %s updated manuscript %s fields: %s", user.id, manuscript_id, sorted(changes)
        )

        if (
            manuscript.status == ManuscriptStatus.PUBLISHED
            and previous_status != ManuscriptStatus.PUBLISHED
        ):
            await notification_service.notify(
                db,
                recipient_id=user.id,
                type=NotificationType.SYSTEM,
                title="Manuscript Published",
                message=f'You published your manuscript: "{manuscript.title}"',
                data={"manuscriptId": manuscript.id},
            )

        return ManuscriptEnvelope(
            message="Manuscript updated successfully",
            manuscript=ManuscriptResponse.model_validate(manuscript),
        )

    async def delete_manuscript(
        self, db: AsyncSession, user: User, manuscript_id: int
    ) -> MessageResponse:
        """Author-only. Chapters, collaborations, comments and reviews cascade."""
        manuscript = await db.get(Manuscript, manuscript_id)
        if manuscript is None:
            raise NotFoundError(resource="manuscript", resource_id=str(manuscript_id))
        if not is_author(manuscript, user.id):
            raise PermissionDeniedError("Only the author can delete this manuscript")

        try:
            await db.execute(delete(Manuscript).where(Manuscript.id == manuscript_id))
        except Exception as e:
            logger.error("Database error deleting manuscript %s: %s", manuscript_id, str(e))
            raise DatabaseError(context={"manuscript_id": manuscript_id})
        logger.info("User %s deleted manuscript %s", user.id, manuscript_id)
        return MessageResponse(message="Manuscript deleted successfully")

    # ══════════════════════════════════════════════════════════════════════
    # Collaboration
    # ══════════════════════════════════════════════════════════════════════

    async def invite(
        self, db: AsyncSession, user: User, payload: InviteRequest
    ) -> CollaborationEnvelope:
        manuscript = await db.get(Manuscript, payload.manuscript_id)
        if manuscript is None:
            raise NotFoundError(resource="manuscript", resource_id=str(payload.manuscript_id))
        if not is_author(manuscript, user.id):
            raise PermissionDeniedError("Only the author can invite collaborators")

        email = normalize_email(payload.email)
        existing = await db.execute(
            select(Collaboration.id).where(
                Collaboration.manuscript_id == manuscript.id,
                Collaboration.email == email,
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise ValidationError("Invitation already sent to this email", field="email")

        invitee_result = await db.execute(select(User).where(User.email == email))
        invitee: Optional[User] = invitee_result.scalar_one_or_none()

        collaboration = Collaboration(
            manuscript_id=manuscript.id,
            email=email,
            user_id=invitee.id if invitee else None,
            role=payload.role,
            status=CollaborationStatus.PENDING,
        )
        try:
            db.add(collaboration)
            await db.flush()
        except IntegrityError:
            raise ValidationError("Invitation already sent to this email", field="email")
        except Exception as e:
            logger.error("Database error inviting to manuscript %s: %s", manuscript.id, str(e))
            raise DatabaseError(context={"manuscript_id": manuscript.id})

        logger.info(
            "User %s invited %s to manuscript %s as %s",
            user.id, email, manuscript.id, payload.role.value,
        )

        if invitee is not None:
            await notification_service.notify(
                db,
                recipient_id=invitee.id,
                type=NotificationType.COLLABORATION,
                title="Collaboration Request",
                message=f'{user.full_name or "Someone"} wants to collaborate on "{manuscript.title}".',
                data={"manuscriptId": manuscript.id, "collaborationId": collaboration.id},
            )

        return CollaborationEnvelope(
            message="Invitation sent successfully",
            collaboration=CollaborationResponse.model_validate(collaboration),
        )

    async def respond(
        self,
        db: AsyncSession,
        user: User,
        collaboration_id: int,
        status: CollaborationStatus,
    ) -> CollaborationEnvelope:
        """
        Accept or decline an invitation.

        Accepting binds the invitation to the caller's account and promotes a
        READER to EDITOR globally. The author hears about either answer.
        """
        result = await db.execute(
            select(Collaboration)
            .where(Collaboration.id == collaboration_id)
            .options(selectinload(Collaboration.manuscript))
        )
        collaboration = result.scalar_one_or_none()
        if collaboration is None:
            raise NotFoundError(resource="invitation", resource_id=str(collaboration_id))
        if not is_invitee(collaboration, user):
            raise PermissionDeniedError("This invitation is not for you")
        if collaboration.status != CollaborationStatus.PENDING:
            raise ValidationError("Invitation has already been processed", field="status")

        try:
            collaboration.status = status
            if status == CollaborationStatus.ACCEPTED:
                collaboration.user_id = user.id
                if user.role == UserRole.READER:
                    user.role = UserRole.EDITOR
                    logger.info("User %s promoted to EDITOR", user.id)
            await db.flush()
        except Exception as e:
            logger.error("Database error answering invitation %s: %s", collaboration_id, str(e))
            raise DatabaseError(context={"collaboration_id": collaboration_id})

        manuscript = collaboration.manuscript
        if status == CollaborationStatus.ACCEPTED:
            await notification_service.notify(
                db,
                recipient_id=manuscript.author_id,
                type=NotificationType.COLLABORATION,
                title="Invitation Accepted",
                message=(
                    f"{user.full_name} ({user.email}) has accepted your invitation to "
                    f'collaborate on "{manuscript.title}" as {collaboration.role.value.lower()}.'
                ),
                data={
                    "manuscriptId": manuscript.id,
                    "collaborationId": collaboration.id,
                    "status": status.value,
                },
            )
        else:
            await notification_service.notify(
                db,
                recipient_id=manuscript.author_id,
                type=NotificationType.COLLABORATION,
                title="Invitation Declined",
                message=(
                    f"{user.full_name} has declined your invitation to collaborate on "
                    f'"{manuscript.title}".'
                ),
                data={"manuscriptId": manuscript.id, "status": status.value},
            )

        logger.info(
            "User %s answered invitation %s: %s", user.id, collaboration_id, status.value
        )
        return CollaborationEnvelope(
            message=f"Invitation {status.value.lower()}",
            collaboration=CollaborationResponse.model_validate(collaboration),
        )

    # ── Helpers ───────────────────────────────────────────────────────────
    async def _chapter_counts(self, db: AsyncSession, manuscript_ids: List[int]) -> Dict[int, int]:
        if not manuscript_ids:
            return {}
        result = await db.execute(
            select(Chapter.manuscript_id, func.count(Chapter.id))
            .where(Chapter.manuscript_id.in_(manuscript_ids))
            .group_by(Chapter.manuscript_id)
        )
        return {manuscript_id: count for manuscript_id, count in result.all()}


# ── Singleton Instance ────────────────────────────────────────────────────
manuscript_service = ManuscriptService()
