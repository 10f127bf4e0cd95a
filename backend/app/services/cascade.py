"""
Cascading deletes across users, entries and votes.

The coordinator mutates the in-memory repositories only; persisting the
touched collections is the caller's job. Callers must hold the mutation locks
of every collection involved.
"""

import logging
from dataclasses import dataclass, field

from backend.app.db.base import ContestDatabase
from backend.app.models.entry import Entry
from backend.app.models.user import User
from backend.app.services.media import MediaStore

logger = logging.getLogger(__name__)


@dataclass
class CascadeReport:
    """What a cascading delete removed, and which media files it failed to remove."""

    removed_entry_ids: list[int] = field(default_factory=list)
    removed_vote_ids: list[int] = field(default_factory=list)
    removed_user_ids: list[int] = field(default_factory=list)
    media_failures: list[str] = field(default_factory=list)

    def merge(self, other: "CascadeReport") -> "CascadeReport":
        self.removed_entry_ids.extend(other.removed_entry_ids)
        self.removed_vote_ids.extend(other.removed_vote_ids)
        self.removed_user_ids.extend(other.removed_user_ids)
        self.media_failures.extend(other.media_failures)
        return self


class CascadeCoordinator:
    """Remove an entity together with every record that references it."""

    def __init__(self, db: ContestDatabase, media: MediaStore):
        self.db = db
        self.media = media

    def discard_media(self, ref: str, report: CascadeReport | None = None) -> bool:
        """
        Best-effort removal of a media file.

        Failures are logged and recorded in ``report`` instead of raised.

        Returns:
            False if the file could not be removed
        """
        try:
            self.media.delete(ref)
        except (OSError, ValueError) as e:
            logger.warning(f"[CASCADE] Failed to delete media {ref}: {e}")
            if report is not None:
                report.media_failures.append(ref)
            return False
        return True

    def delete_entry(self, entry: Entry) -> CascadeReport:
        """
        Delete an entry, its image and every vote cast for it.

        The image reference is captured before the entry record is dropped.
        """
        report = CascadeReport()
        image_ref = entry.image_ref

        if image_ref:
            self.discard_media(image_ref, report)

        self.db.entries.remove(entry.id)
        report.removed_entry_ids.append(entry.id)

        removed_votes = self.db.votes.remove_by_entry(entry.id)
        report.removed_vote_ids.extend(v.id for v in removed_votes)

        logger.info(f"[CASCADE] Deleted entry {entry.id} and {len(removed_votes)} votes")
        return report

    def delete_account(self, user: User) -> CascadeReport:
        """
        Delete a user together with their entry (and its votes) and every vote they cast.

        Votes the user cast on other entries decrement those entries' counters.
        """
        report = CascadeReport()

        owned = self.db.entries.find_by_owner(user.id)
        if owned:
            report.merge(self.delete_entry(owned))

        cast_votes = self.db.votes.remove_by_user(user.id)
        for vote in cast_votes:
            target = self.db.entries.find_by_id(vote.entry_id)
            if target:
                target.votes = max(0, target.votes - 1)
        report.removed_vote_ids.extend(v.id for v in cast_votes)

        self.db.users.remove(user.id)
        report.removed_user_ids.append(user.id)

        logger.info(
            f"[CASCADE] Deleted user {user.id}: {len(report.removed_entry_ids)} entries, "
            f"{len(report.removed_vote_ids)} votes"
        )
        return report

    def clear_entries(self) -> CascadeReport:
        """Delete every entry (and therefore every vote)."""
        report = CascadeReport()
        for entry in self.db.entries.all():
            report.merge(self.delete_entry(entry))
        # Votes whose entry was already missing
        report.removed_vote_ids.extend(v.id for v in self.db.votes.all())
        self.db.votes.clear()
        return report

    def clear_votes(self) -> CascadeReport:
        """Delete every vote and reset every entry's counter."""
        report = CascadeReport(removed_vote_ids=[v.id for v in self.db.votes.all()])
        self.db.votes.clear()
        for entry in self.db.entries.all():
            entry.votes = 0
        return report
