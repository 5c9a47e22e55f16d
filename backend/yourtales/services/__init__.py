# Services package init
"""
YourTales Backend - Services Layer
===================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).
How:   Services receive the request's AsyncSession and the signed-in user,
       apply permission checks and business rules, and return response models.

Service Inventory:
    - UserService:          accounts, OTP verification, login, passwords
    - ManuscriptService:    manuscripts, dashboard stats, invitations
    - ChapterService:       chapters of a manuscript
    - FeedbackService:      comments and reviews on chapters
    - NotificationService:  best-effort notify() and the per-user feed
    - EmailService:         OTP delivery over SMTP (background task)
    - permissions:          pure predicates (is_author, can_edit, ...)

Each service module exposes a stateless singleton instance
(e.g. `manuscript_service`) that routes import directly.
"""
