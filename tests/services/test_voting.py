# tests/services/test_voting.py
"""Tests for vote transitions and the reputation they drive."""

import pytest

from agora.core.errors import ConflictError, NotFoundError, UnauthorizedError
from agora.models import Post, PostVisibility, PostVote, User, VoteType
from agora.services.voting import (
    VOTE_REJECTIONS,
    VOTE_TRANSITIONS,
    VoteAction,
    VotingService,
    resolve_transition,
)

from tests.conftest import persist_users


@pytest.fixture()
def voting(db_session):
    return VotingService(db_session)


def _reputations(db_session, post_id: str, author_id: str) -> tuple[int, int]:
    db_session.expire_all()
    return db_session.get(Post, post_id).reputation, db_session.get(User, author_id).reputation


def test_transition_table_is_total() -> None:
    states = [None, VoteType.UP, VoteType.DOWN]
    for state in states:
        for action in VoteAction:
            key = (state, action)
            assert (key in VOTE_TRANSITIONS) != (key in VOTE_REJECTIONS)


def test_author_never_gains_from_downvotes() -> None:
    for transition in VOTE_TRANSITIONS.values():
        if transition.result == VoteType.DOWN:
            assert transition.author_delta <= 0


def test_resolve_transition_rejections() -> None:
    with pytest.raises(ConflictError, match="already upvoted"):
        resolve_transition(VoteType.UP, VoteAction.UPVOTE)
    with pytest.raises(ConflictError, match="already downvoted"):
        resolve_transition(VoteType.DOWN, VoteAction.DOWNVOTE)
    with pytest.raises(NotFoundError, match="Vote not found"):
        resolve_transition(None, VoteAction.REMOVE)


def test_upvote_twice(voting, db_session, test_user, other_user, make_post) -> None:
    post = make_post(other_user)

    outcome = voting.upvote(test_user.id, post.id)
    assert outcome.vote == VoteType.UP
    assert outcome.reputation == 1
    assert _reputations(db_session, post.id, other_user.id) == (1, 1)

    with pytest.raises(ConflictError):
        voting.upvote(test_user.id, post.id)
    assert _reputations(db_session, post.id, other_user.id) == (1, 1)


def test_switch_down_to_up(voting, db_session, test_user, other_user, make_post) -> None:
    post = make_post(other_user)

    down = voting.downvote(test_user.id, post.id)
    assert down.reputation == -1
    assert _reputations(db_session, post.id, other_user.id) == (-1, 0)

    up = voting.upvote(test_user.id, post.id)
    assert up.reputation - down.reputation == 2
    assert _reputations(db_session, post.id, other_user.id) == (1, 1)
    assert voting.current_vote(test_user.id, post.id) == VoteType.UP


def test_switch_up_to_down(voting, db_session, test_user, other_user, make_post) -> None:
    post = make_post(other_user)
    voting.upvote(test_user.id, post.id)

    outcome = voting.downvote(test_user.id, post.id)
    assert outcome.reputation == -1
    assert _reputations(db_session, post.id, other_user.id) == (-1, 0)


def test_remove_vote_reverts(voting, db_session, test_user, other_user, make_post) -> None:
    post = make_post(other_user)
    voting.upvote(test_user.id, post.id)

    outcome = voting.remove_vote(test_user.id, post.id)
    assert outcome.vote is None
    assert _reputations(db_session, post.id, other_user.id) == (0, 0)
    assert db_session.get(PostVote, (test_user.id, post.id)) is None

    voting.downvote(test_user.id, post.id)
    voting.remove_vote(test_user.id, post.id)
    assert _reputations(db_session, post.id, other_user.id) == (0, 0)


def test_remove_missing_vote(voting, test_user, other_user, make_post) -> None:
    post = make_post(other_user)
    with pytest.raises(NotFoundError):
        voting.remove_vote(test_user.id, post.id)


def test_self_vote_moves_only_post_reputation(voting, db_session, test_user, make_post) -> None:
    post = make_post(test_user)
    voting.upvote(test_user.id, post.id)
    assert _reputations(db_session, post.id, test_user.id) == (1, 0)


def test_vote_on_hidden_post(voting, test_user, other_user, make_post) -> None:
    post = make_post(other_user, PostVisibility.PRIVATE)
    with pytest.raises(UnauthorizedError):
        voting.upvote(test_user.id, post.id)


def test_vote_on_missing_post(voting, test_user) -> None:
    with pytest.raises(NotFoundError):
        voting.downvote(test_user.id, "missing")


def test_accepted_follower_can_vote_on_private_post(
    voting, test_user, other_user, make_post, make_follow
) -> None:
    post = make_post(other_user, PostVisibility.PRIVATE)
    make_follow(test_user, other_user)
    assert voting.upvote(test_user.id, post.id).reputation == 1


def test_vote_does_not_touch_updated_at(voting, db_session, test_user, other_user, make_post) -> None:
    post = make_post(other_user)
    before = post.updated_at

    voting.upvote(test_user.id, post.id)
    db_session.expire_all()
    assert db_session.get(Post, post.id).updated_at == before


def _interleaved_voting(file_sessionmaker, first_vote: VoteType):
    """Return (s1, s2, ids) where s2 already holds the vote as ``first_vote``."""
    s1 = file_sessionmaker()
    s2 = file_sessionmaker()
    voter, author = persist_users(s1, "alice", "bob")
    post = Post(user_id=author.id, latitude=0.0, longitude=0.0)
    s1.add(post)
    s1.commit()
    voter_id, author_id, post_id = voter.id, author.id, post.id

    if first_vote == VoteType.UP:
        VotingService(s1).upvote(voter_id, post_id)
    else:
        VotingService(s1).downvote(voter_id, post_id)
    # The second request reads the vote before the first one writes.
    held = s2.get(PostVote, (voter_id, post_id))
    assert held.type == first_vote
    # Hold the vote strongly so s2's identity map keeps the stale read.
    s2.info["held"] = held
    return s1, s2, (voter_id, author_id, post_id)


def test_concurrent_remove_applies_deltas_once(file_sessionmaker) -> None:
    s1, s2, (voter_id, author_id, post_id) = _interleaved_voting(file_sessionmaker, VoteType.UP)
    try:
        VotingService(s1).remove_vote(voter_id, post_id)
        with pytest.raises(ConflictError, match="another request"):
            VotingService(s2).remove_vote(voter_id, post_id)

        assert _reputations(s1, post_id, author_id) == (0, 0)
        assert s1.get(PostVote, (voter_id, post_id)) is None
    finally:
        s1.close()
        s2.close()


def test_concurrent_switch_applies_deltas_once(file_sessionmaker) -> None:
    s1, s2, (voter_id, author_id, post_id) = _interleaved_voting(file_sessionmaker, VoteType.DOWN)
    try:
        assert VotingService(s1).upvote(voter_id, post_id).reputation == 1
        with pytest.raises(ConflictError, match="another request"):
            VotingService(s2).upvote(voter_id, post_id)

        assert _reputations(s1, post_id, author_id) == (1, 1)
        assert s1.get(PostVote, (voter_id, post_id)).type == VoteType.UP
    finally:
        s1.close()
        s2.close()
