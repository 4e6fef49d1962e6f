# utils/models.py

"""
Base model for every firm record.

Key Features:
- UUID identity that doubles as the record's storage key
- Timestamps in the firm's local timezone
- Originating IP tracking from the request context
- Change reason tracking
"""

from django.db import models
from django.utils import timezone
import uuid
import logging

logger = logging.getLogger(__name__)

# Filled in by BaseModel.save(); excluded from full_clean() on unsaved records
AUDIT_FIELDS = ['created_at', 'updated_at', 'created_from_ip', 'updated_from_ip', 'change_reason']


# =============================================================================
# BASE MODEL - FIRM RECORDS
# =============================================================================

class BaseModel(models.Model):
    """
    Abstract base for all firm records.

    Features:
    - Automatic created_at / updated_at handling
    - Real IP address tracking (where operations came from)
    - Change reason tracking (why changes were made)
    - Thread-local context integration (see utils.context)
    """

    # Core identification
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Timestamp fields - set in save() using the firm's local time
    created_at = models.DateTimeField(
        "Created At",
        db_index=True,
        help_text="When this record was created"
    )
    updated_at = models.DateTimeField(
        "Updated At",
        db_index=True,
        help_text="When this record was last updated"
    )

    # Enhanced IP tracking - captures real client IP
    created_from_ip = models.GenericIPAddressField(
        "Created From IP",
        null=True,
        blank=True,
        help_text="IP address from which this record was created"
    )
    updated_from_ip = models.GenericIPAddressField(
        "Updated From IP",
        null=True,
        blank=True,
        help_text="IP address from which this record was last updated"
    )

    # Change reason tracking
    change_reason = models.CharField(
        "Change Reason",
        max_length=255,
        blank=True,
        null=True,
        help_text="Explanation for why this change was made"
    )

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        """
        Override save to:
        1. Set timestamps in the firm's local timezone
        2. Populate IP audit fields from the request context
        """
        from utils.context import get_request_context

        is_new = self._state.adding
        now = timezone.localtime()

        # =========================================================================
        # STEP 1: TIMESTAMPS
        # =========================================================================
        if is_new:
            # Only set if not already provided (respects manual override)
            if not self.created_at:
                self.created_at = now
            if not self.updated_at:
                self.updated_at = now
        else:
            self.updated_at = now

        # =========================================================================
        # STEP 2: AUDIT FIELDS FROM REQUEST CONTEXT
        # =========================================================================
        context = get_request_context()

        if context:
            ip_address = context.get('ip_address')
            if ip_address:
                if is_new and not self.created_from_ip:
                    self.created_from_ip = ip_address
                self.updated_from_ip = ip_address
        elif is_new:
            logger.debug(
                f"No request context available when creating {self.__class__.__name__}. "
                f"Audit fields will not be populated."
            )

        return super().save(*args, **kwargs)

    def get_audit_trail(self):
        """
        Get audit information for this record.

        Returns:
            dict: Audit trail information
        """
        return {
            'created_at': self.created_at,
            'updated_at': self.updated_at,
            'created_from_ip': self.created_from_ip,
            'updated_from_ip': self.updated_from_ip,
            'change_reason': self.change_reason,
        }
