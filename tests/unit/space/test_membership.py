"""Tests for join requests and leaving a space."""

from uuid import uuid4

import pytest

from gogrind.core.modules.space import membership
from gogrind.errors import AccessDeniedError, ValidationError


def assert_disjoint(space):
    assert not set(space.members) & set(space.pending_requests)


class TestRequestJoin:
    """Tests for request_join."""

    def test_adds_pending_request(self, space, outsider):
        """Test that a join request is added to pending requests."""
        membership.request_join(space, outsider.id)
        assert space.pending_requests == [outsider.id]
        assert_disjoint(space)

    def test_member_cannot_request(self, space, member):
        """Test that members cannot request to join."""
        with pytest.raises(ValidationError, match="already a member"):
            membership.request_join(space, member.id)

    def test_creator_counts_as_member(self, space, creator):
        """Test that the creator counts as a member even if missing from members."""
        space.members = []
        with pytest.raises(ValidationError, match="already a member"):
            membership.request_join(space, creator.id)

    def test_duplicate_request(self, space, outsider):
        """Test that a user cannot request to join twice."""
        membership.request_join(space, outsider.id)
        with pytest.raises(ValidationError, match="already requested"):
            membership.request_join(space, outsider.id)
        assert space.pending_requests == [outsider.id]

    def test_full_space(self, space, outsider):
        """Test that a full space rejects join requests."""
        space.max_members = 2
        with pytest.raises(ValidationError, match="full"):
            membership.request_join(space, outsider.id)


class TestApproveRequest:
    """Tests for approve_request."""

    def test_moves_user_to_members(self, space, creator, outsider):
        """Test that approval moves the user from pending requests to members."""
        membership.request_join(space, outsider.id)
        membership.approve_request(space, creator.id, outsider.id)

        assert outsider.id in space.members
        assert space.pending_requests == []
        assert_disjoint(space)

    def test_only_creator_can_approve(self, space, member, outsider):
        """Test that only the creator can approve requests."""
        membership.request_join(space, outsider.id)
        with pytest.raises(AccessDeniedError):
            membership.approve_request(space, member.id, outsider.id)

    def test_requires_pending_request(self, space, creator, outsider):
        """Test that a pending request is required."""
        with pytest.raises(ValidationError, match="has not requested"):
            membership.approve_request(space, creator.id, outsider.id)

    def test_space_filled_after_request(self, space, creator, outsider):
        """Test that approval fails once the space filled up after the request."""
        membership.request_join(space, outsider.id)
        space.members.append(uuid4())
        with pytest.raises(ValidationError, match="full"):
            membership.approve_request(space, creator.id, outsider.id)
        assert outsider.id in space.pending_requests


class TestRejectRequest:
    """Tests for reject_request."""

    def test_removes_pending_request(self, space, creator, outsider):
        """Test that rejection removes the pending request."""
        membership.request_join(space, outsider.id)
        membership.reject_request(space, creator.id, outsider.id)

        assert space.pending_requests == []
        assert outsider.id not in space.members

    def test_only_creator_can_reject(self, space, member, outsider):
        """Test that only the creator can reject requests."""
        membership.request_join(space, outsider.id)
        with pytest.raises(AccessDeniedError):
            membership.reject_request(space, member.id, outsider.id)

    def test_requires_pending_request(self, space, creator, outsider):
        """Test that a pending request is required."""
        with pytest.raises(ValidationError):
            membership.reject_request(space, creator.id, outsider.id)

    def test_can_request_again_after_rejection(self, space, creator, outsider):
        """Test that a rejected user can request to join again."""
        membership.request_join(space, outsider.id)
        membership.reject_request(space, creator.id, outsider.id)
        membership.request_join(space, outsider.id)
        assert space.pending_requests == [outsider.id]


class TestLeave:
    """Tests for leave."""

    def test_member_leaves(self, space, member):
        """Test that a member can leave the space."""
        membership.leave(space, member.id)
        assert member.id not in space.members

    def test_creator_cannot_leave(self, space, creator):
        """Test that the creator cannot leave the space."""
        with pytest.raises(ValidationError, match="Creator cannot leave"):
            membership.leave(space, creator.id)

    def test_non_member_cannot_leave(self, space, outsider):
        """Test that non-members cannot leave."""
        with pytest.raises(ValidationError, match="not a member"):
            membership.leave(space, outsider.id)
