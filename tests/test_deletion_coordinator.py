"""
DeletionCoordinator com o armazenamento no banco.
"""

from unittest import mock

import pytest

from apps.core.exceptions import InternalError, NoVoteInProgress, NotFound, PermissionDenied
from apps.core.kv_store import deletion_vote_key, kv_store, project_key, tasks_key
from apps.notifications.service import (
    DELETION_CANCELLED, DELETION_REJECTED, DELETION_VOTE, PROJECT_DELETED, NotificationSink,
    notification_sink
)
from apps.projects.deletion import (
    ConfirmationRequired, Deleted, DeletionCoordinator, Rejected, VoteCancelled, VoteOpened,
    VoteRecorded, deletion_coordinator
)
from conftest import FINISHED_TASKS, OPEN_TASKS


class FailingSink(NotificationSink):
    def create(self, *args, **kwargs):
        raise InternalError('Notification store unavailable')


@pytest.fixture
def team(make_project, owner, alice, bob):
    return make_project(owner, members=[alice, bob], tasks=OPEN_TASKS)


@pytest.fixture
def open_vote(team, owner):
    deletion_coordinator.request_deletion('p1', owner.user_id, owner.display_name)
    return kv_store.get(deletion_vote_key('p1'))


def project_exists(project_id='p1'):
    return kv_store.get(project_key(project_id)) is not None


@pytest.mark.django_db
class TestRequestDeletion:

    def test_finished_project_is_removed_with_its_records(self, make_project, owner, alice):
        make_project(owner, members=[alice], tasks=FINISHED_TASKS)
        # Votação que sobrou de um pedido anterior
        kv_store.set(deletion_vote_key('p1'), {
            'projectId': 'p1', 'requestedBy': owner.user_id, 'votes': [owner.user_id], 'required': 2,
        })

        outcome = deletion_coordinator.request_deletion('p1', owner.user_id)

        assert outcome == Deleted()
        assert not project_exists()
        assert kv_store.get(tasks_key('p1')) is None
        assert kv_store.get(deletion_vote_key('p1')) is None

    def test_solo_owner_confirms_with_force_delete(self, make_project, owner):
        make_project(owner, tasks=OPEN_TASKS)

        outcome = deletion_coordinator.request_deletion('p1', owner.user_id)

        assert outcome == ConfirmationRequired(incomplete_tasks=2)
        assert project_exists()
        assert kv_store.get(deletion_vote_key('p1')) is None

        assert deletion_coordinator.force_delete('p1', owner.user_id) == Deleted()
        assert not project_exists()

    def test_team_request_opens_vote_and_notifies_members(self, team, owner, alice, bob):
        outcome = deletion_coordinator.request_deletion('p1', owner.user_id, 'Olivia')

        assert outcome == VoteOpened(votes=1, required=3)
        vote = kv_store.get(deletion_vote_key('p1'))
        assert vote['votes'] == [owner.user_id]
        assert vote['requestedBy'] == owner.user_id
        assert vote['requestedAt']

        for member in (alice, bob):
            [notification] = notification_sink.list_for_user(member.user_id)
            assert notification['type'] == DELETION_VOTE
            assert notification['projectId'] == 'p1'
            assert notification['message'] == 'Olivia wants to delete project "Apollo". Vote required!'
        assert notification_sink.list_for_user(owner.user_id) == []

    def test_vote_status_for_members(self, open_vote, owner, alice):
        status = deletion_coordinator.get_vote_status('p1', alice.user_id)
        assert status.in_progress
        assert (status.votes, status.required, status.has_voted) == (1, 3, False)
        assert status.incomplete_tasks == 2

        assert deletion_coordinator.get_vote_status('p1', owner.user_id).has_voted

    def test_unknown_project(self, owner):
        with pytest.raises(NotFound, match='Project not found'):
            deletion_coordinator.request_deletion('missing', owner.user_id)

    def test_member_request_changes_nothing(self, team, alice):
        with pytest.raises(PermissionDenied):
            deletion_coordinator.request_deletion('p1', alice.user_id)

        assert project_exists()
        assert kv_store.get(deletion_vote_key('p1')) is None
        assert notification_sink.list_for_user(alice.user_id) == []


@pytest.mark.django_db
class TestCastVote:

    def test_approvals_reach_quorum(self, open_vote, owner, alice, bob):
        assert deletion_coordinator.cast_vote('p1', alice.user_id, True) == VoteRecorded(2, 3)
        # Aprovar duas vezes não conta de novo
        assert deletion_coordinator.cast_vote('p1', alice.user_id, True) == VoteRecorded(2, 3)
        assert kv_store.get(deletion_vote_key('p1'))['votes'] == [owner.user_id, alice.user_id]

        outcome = deletion_coordinator.cast_vote('p1', bob.user_id, True)

        assert outcome == Deleted(approved=True)
        assert not project_exists()
        assert kv_store.get(tasks_key('p1')) is None
        assert kv_store.get(deletion_vote_key('p1')) is None
        for member in (owner, alice, bob):
            assert notification_sink.list_for_user(member.user_id)[0]['type'] == PROJECT_DELETED

        with pytest.raises(NotFound):
            deletion_coordinator.get_vote_status('p1', owner.user_id)

    def test_rejection_keeps_project_and_tells_owner(self, open_vote, owner, bob):
        outcome = deletion_coordinator.cast_vote('p1', bob.user_id, False, 'Bob')

        assert outcome == Rejected()
        assert project_exists()
        assert kv_store.get(deletion_vote_key('p1')) is None
        assert not deletion_coordinator.get_vote_status('p1', owner.user_id).in_progress

        [notification] = notification_sink.list_for_user(owner.user_id)
        assert notification['type'] == DELETION_REJECTED
        assert notification['message'] == 'Bob rejected deletion of project "Apollo"'

    def test_outsider_is_refused(self, open_vote, make_user):
        mallory = make_user('Mallory')

        with pytest.raises(PermissionDenied):
            deletion_coordinator.cast_vote('p1', mallory.user_id, True)
        with pytest.raises(PermissionDenied):
            deletion_coordinator.get_vote_status('p1', mallory.user_id)

        assert kv_store.get(deletion_vote_key('p1')) == open_vote

    def test_vote_without_request(self, team, alice):
        with pytest.raises(NoVoteInProgress):
            deletion_coordinator.cast_vote('p1', alice.user_id, True)

    def test_failed_notification_rolls_back_deletion(self, open_vote, alice, bob):
        coordinator = DeletionCoordinator(notifications=FailingSink())
        deletion_coordinator.cast_vote('p1', alice.user_id, True)

        with pytest.raises(InternalError):
            coordinator.cast_vote('p1', bob.user_id, True)

        assert project_exists()
        assert kv_store.get(tasks_key('p1')) == OPEN_TASKS
        assert len(kv_store.get(deletion_vote_key('p1'))['votes']) == 2


@pytest.mark.django_db
class TestMemberRemoved:

    def drop_member(self, member):
        project = kv_store.get(project_key('p1'))
        project['members'] = [m for m in project['members'] if m != member.user_id]
        kv_store.set(project_key('p1'), project)

    def test_open_vote_is_cancelled_and_team_told(self, open_vote, owner, alice, bob):
        self.drop_member(bob)

        outcome = deletion_coordinator.member_removed('p1', bob.user_id, owner.user_id)

        assert outcome == VoteCancelled()
        assert kv_store.get(deletion_vote_key('p1')) is None
        assert project_exists()
        assert notification_sink.list_for_user(alice.user_id)[0]['type'] == DELETION_CANCELLED
        assert notification_sink.list_for_user(owner.user_id) == []

    def test_without_vote_nothing_happens(self, team, owner, alice, bob):
        self.drop_member(bob)

        assert deletion_coordinator.member_removed('p1', bob.user_id, owner.user_id) is None
        assert notification_sink.list_for_user(alice.user_id) == []


@pytest.mark.django_db
class TestRowLock:

    @pytest.mark.parametrize('call', [
        lambda owner, alice: deletion_coordinator.request_deletion('p1', owner.user_id),
        lambda owner, alice: deletion_coordinator.cast_vote('p1', alice.user_id, True),
        lambda owner, alice: deletion_coordinator.force_delete('p1', owner.user_id),
    ])
    def test_writes_lock_the_project_row(self, open_vote, owner, alice, call):
        with mock.patch.object(kv_store, 'get', wraps=kv_store.get) as get:
            call(owner, alice)

        get.assert_any_call(project_key('p1'), for_update=True)

    def test_status_read_does_not_lock(self, open_vote, alice):
        with mock.patch.object(kv_store, 'get', wraps=kv_store.get) as get:
            deletion_coordinator.get_vote_status('p1', alice.user_id)

        assert mock.call(project_key('p1'), for_update=True) not in get.call_args_list
