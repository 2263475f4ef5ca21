"""Tests for notification metadata."""

from uuid import uuid4

from gogrind.core.modules.notification.models import (
    FocusSessionRef,
    FriendRequestRef,
    JoinRequestRef,
    Notification,
    NotificationType,
    StreamRemovalRef,
    metadata_filter,
)


class TestMetadata:
    """Tests for the metadata union and matching filters."""

    def test_filter_matches_kind_and_id(self):
        """Test that the metadata filter matches the kind and the ID."""
        request_id = uuid4()
        assert metadata_filter(FriendRequestRef(friend_request_id=request_id)) == {
            "metadata.kind": "friend_request",
            "metadata.friend_request_id": request_id,
        }

    def test_roundtrip_through_storage_picks_variant(self, creator, member):
        """Test that stored metadata loads back as the right variant."""
        space_id = uuid4()
        notification = Notification(
            recipient_id=creator.id,
            sender_id=member.id,
            type=NotificationType.SPACE_JOIN_REQUEST,
            message="Space Member wants to join Calculus crew",
            metadata=JoinRequestRef(space_id=space_id),
        )

        loaded = Notification.model_validate(notification.to_mongo())

        assert isinstance(loaded.metadata, JoinRequestRef)
        assert loaded.metadata.space_id == space_id
        assert loaded.id == notification.id

    def test_variants_with_same_shape_stay_distinct(self):
        """Test that the kind field selects the metadata variant."""
        session_id = uuid4()
        focus = Notification.model_validate(
            {
                "recipient_id": uuid4(),
                "sender_id": uuid4(),
                "type": "encouragement",
                "message": "x",
                "metadata": {"kind": "focus_session", "session_id": session_id},
            }
        )
        assert isinstance(focus.metadata, FocusSessionRef)

    def test_removal_reason_is_optional(self):
        """Test that the removal reason is optional."""
        assert StreamRemovalRef().reason is None
        assert metadata_filter(StreamRemovalRef(reason="spam")) == {
            "metadata.kind": "stream_removal",
            "metadata.reason": "spam",
        }

    def test_no_metadata(self, creator, member):
        """Test that notifications without metadata are valid."""
        notification = Notification(
            recipient_id=creator.id,
            sender_id=member.id,
            type=NotificationType.FRIEND_REQUEST_ACCEPTED,
            message="Space Member accepted your friend request",
        )
        assert notification.metadata is None
        assert notification.read is False
