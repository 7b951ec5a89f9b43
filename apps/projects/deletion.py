# apps/projects/deletion.py

"""
Fluxo de exclusão de projetos

O dono pede para excluir um projeto. Conforme o estado do projeto, o
pedido tem uma de três respostas:

- nenhuma tarefa pendente: o projeto é excluído na hora
- tarefas pendentes e o dono é o único membro: o dono precisa
  confirmar com a exclusão forçada
- tarefas pendentes e vários membros: abre-se uma votação em que todos
  precisam aprovar; uma única rejeição a cancela

A decisão em si é a função pura evaluate(), que retorna o resultado, as
alterações nos registros e as notificações a enviar.
DeletionCoordinator carrega os registros, chama evaluate() e aplica o
resultado em uma transação que mantém a linha do projeto travada.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

from django.db import transaction

from apps.board.utils import count_incomplete
from apps.core.exceptions import InvalidRequest, NoVoteInProgress, NotFound, PermissionDenied
from apps.core.kv_store import (
    KeyValueStore, deletion_vote_key, kv_store, project_key, tasks_key
)
from apps.core.utils import now_iso
from apps.notifications.service import (
    DELETION_CANCELLED, DELETION_REJECTED, DELETION_VOTE, PROJECT_DELETED,
    NotificationSink, notification_sink
)

logger = logging.getLogger(__name__)

DELETED_MESSAGE = 'Project deleted successfully'


# =================== REGISTROS ===================

@dataclass(frozen=True)
class Project:
    """As partes do documento de projeto que o fluxo consulta"""

    id: str
    name: str
    owner_id: str
    members: Tuple[str, ...]

    @classmethod
    def from_record(cls, record: Dict) -> 'Project':
        return cls(
            id=record['id'],
            name=record.get('name', ''),
            owner_id=record['ownerId'],
            members=tuple(record.get('members') or ()),
        )


@dataclass
class DeletionVote:
    """Votação de exclusão em aberto - no máximo uma por projeto"""

    project_id: str
    requested_by: str
    requested_at: str
    votes: List[str]
    required: int
    incomplete_tasks: int

    @classmethod
    def from_record(cls, record: Dict) -> 'DeletionVote':
        return cls(
            project_id=record['projectId'],
            requested_by=record['requestedBy'],
            requested_at=record.get('requestedAt', ''),
            votes=list(record.get('votes') or []),
            required=record['required'],
            incomplete_tasks=record.get('incompleteTasks', 0),
        )

    def to_record(self) -> Dict:
        return {
            'projectId': self.project_id,
            'requestedBy': self.requested_by,
            'requestedAt': self.requested_at,
            'votes': list(self.votes),
            'required': self.required,
            'incompleteTasks': self.incomplete_tasks,
        }


# =================== PEDIDOS ===================

@dataclass(frozen=True)
class RequestDeletion:
    requester_id: str
    requester_name: str = ''
    requested_at: str = ''


@dataclass(frozen=True)
class ForceDelete:
    requester_id: str


@dataclass(frozen=True)
class CastVote:
    """approve chega como veio no corpo da requisição e é validado em evaluate()"""

    voter_id: str
    approve: object
    voter_name: str = ''


@dataclass(frozen=True)
class MemberRemoved:
    """O dono tirou member_id da equipe; project já vem sem ele"""

    member_id: str
    removed_by: str


DeletionRequest = Union[RequestDeletion, ForceDelete, CastVote, MemberRemoved]


# =================== RESULTADOS ===================

@dataclass(frozen=True)
class Deleted:
    approved: Optional[bool] = None

    def to_response(self) -> Dict:
        response = {'success': True, 'deleted': True, 'message': DELETED_MESSAGE}
        if self.approved is not None:
            response['approved'] = self.approved
        return response


@dataclass(frozen=True)
class ConfirmationRequired:
    incomplete_tasks: int

    def to_response(self) -> Dict:
        return {
            'success': False,
            'requiresConfirmation': True,
            'incompleteTasks': self.incomplete_tasks,
            'message': 'Project has incomplete tasks. Confirm deletion?',
        }


@dataclass(frozen=True)
class VoteOpened:
    votes: int
    required: int

    def to_response(self) -> Dict:
        return {
            'success': True,
            'votingRequired': True,
            'votes': self.votes,
            'required': self.required,
            'message': 'Deletion vote initiated. Waiting for team approval.',
        }


@dataclass(frozen=True)
class VoteRecorded:
    votes: int
    required: int

    def to_response(self) -> Dict:
        return {
            'success': True,
            'approved': True,
            'votes': self.votes,
            'required': self.required,
            'message': f'Vote recorded. {self.votes}/{self.required} votes received.',
        }


@dataclass(frozen=True)
class Rejected:

    def to_response(self) -> Dict:
        return {'success': True, 'approved': False, 'message': 'Deletion request rejected'}


@dataclass(frozen=True)
class VoteCancelled:
    """A equipe mudou durante a votação"""

    def to_response(self) -> Dict:
        return {'success': True, 'voteInProgress': False, 'message': 'Deletion vote cancelled'}


Outcome = Union[Deleted, ConfirmationRequired, VoteOpened, VoteRecorded, Rejected, VoteCancelled]


@dataclass(frozen=True)
class VoteStatus:
    """Leitura consultada pelos clientes via polling"""

    in_progress: bool
    votes: int = 0
    required: int = 0
    has_voted: bool = False
    incomplete_tasks: int = 0

    def to_response(self) -> Dict:
        if not self.in_progress:
            return {'success': True, 'voteInProgress': False}
        return {
            'success': True,
            'voteInProgress': True,
            'votes': self.votes,
            'required': self.required,
            'hasVoted': self.has_voted,
            'incompleteTasks': self.incomplete_tasks,
        }


@dataclass(frozen=True)
class NotificationIntent:
    user_id: str
    type: str
    message: str


@dataclass
class Decision:
    """
    Resultado de evaluate()

    finalize apaga o projeto, as tarefas e a votação. Fora isso,
    clear_vote apaga a votação, ou vote (quando presente) é gravado.
    outcome None significa que nada mudou.
    """

    outcome: Optional[Outcome]
    vote: Optional[DeletionVote] = None
    clear_vote: bool = False
    finalize: bool = False
    notifications: List[NotificationIntent] = field(default_factory=list)


# =================== LÓGICA DE DECISÃO ===================

def evaluate(project: Project, task_set, vote: Optional[DeletionVote],
             request: DeletionRequest) -> Decision:
    """
    Decide o que um pedido de exclusão faz com o projeto

    Pura: lê apenas os argumentos e não faz I/O. Levanta PermissionDenied,
    NoVoteInProgress ou InvalidRequest antes de decidir qualquer coisa.
    """
    if isinstance(request, RequestDeletion):
        return _evaluate_request(project, task_set, request)
    if isinstance(request, ForceDelete):
        _require_owner(project, request.requester_id)
        return Decision(outcome=Deleted(), finalize=True)
    if isinstance(request, CastVote):
        return _evaluate_vote(project, vote, request)
    if isinstance(request, MemberRemoved):
        return _evaluate_member_removed(project, vote, request)
    raise TypeError(f'Unknown deletion request: {request!r}')


def _require_owner(project: Project, user_id: str):
    if user_id != project.owner_id:
        raise PermissionDenied('Only project owner can delete')


def _require_member(project: Project, user_id: str):
    if user_id not in project.members:
        raise PermissionDenied('Not a member of this project')


def _evaluate_request(project: Project, task_set, request: RequestDeletion) -> Decision:
    _require_owner(project, request.requester_id)

    incomplete = count_incomplete(task_set)
    if incomplete == 0:
        return Decision(outcome=Deleted(), finalize=True)

    if len(project.members) == 1:
        return Decision(outcome=ConfirmationRequired(incomplete_tasks=incomplete))

    # Um novo pedido com votação aberta recomeça a votação
    vote = DeletionVote(
        project_id=project.id,
        requested_by=request.requester_id,
        requested_at=request.requested_at,
        votes=[request.requester_id],
        required=len(project.members),
        incomplete_tasks=incomplete,
    )
    requester_name = request.requester_name or 'A team member'
    message = f'{requester_name} wants to delete project "{project.name}". Vote required!'
    notifications = [
        NotificationIntent(member_id, DELETION_VOTE, message)
        for member_id in project.members
        if member_id != request.requester_id
    ]

    return Decision(
        outcome=VoteOpened(votes=len(vote.votes), required=vote.required),
        vote=vote,
        notifications=notifications,
    )


def _evaluate_vote(project: Project, vote: Optional[DeletionVote], request: CastVote) -> Decision:
    _require_member(project, request.voter_id)

    if vote is None:
        raise NoVoteInProgress()

    if not isinstance(request.approve, bool):
        raise InvalidRequest('approve must be true or false')

    if not request.approve:
        voter_name = request.voter_name or 'A team member'
        return Decision(
            outcome=Rejected(),
            clear_vote=True,
            notifications=[NotificationIntent(
                vote.requested_by,
                DELETION_REJECTED,
                f'{voter_name} rejected deletion of project "{project.name}"',
            )],
        )

    updated = None
    votes = vote.votes
    if request.voter_id not in votes:
        votes = votes + [request.voter_id]
        updated = DeletionVote(
            project_id=vote.project_id,
            requested_by=vote.requested_by,
            requested_at=vote.requested_at,
            votes=votes,
            required=vote.required,
            incomplete_tasks=vote.incomplete_tasks,
        )

    if len(votes) >= vote.required:
        message = f'Project "{project.name}" has been deleted'
        return Decision(
            outcome=Deleted(approved=True),
            finalize=True,
            notifications=[
                NotificationIntent(member_id, PROJECT_DELETED, message)
                for member_id in project.members
            ],
        )

    return Decision(
        outcome=VoteRecorded(votes=len(votes), required=vote.required),
        vote=updated,
    )


def _evaluate_member_removed(project: Project, vote: Optional[DeletionVote],
                             request: MemberRemoved) -> Decision:
    """
    A votação em aberto é cancelada quando a equipe perde um membro

    Os votos e o total exigido valem para a equipe de quando a votação
    abriu; o dono pode pedir de novo para a equipe atual votar.
    """
    _require_owner(project, request.removed_by)

    if vote is None:
        return Decision(outcome=None)

    message = f'Deletion vote on project "{project.name}" was cancelled because the team changed'
    return Decision(
        outcome=VoteCancelled(),
        clear_vote=True,
        notifications=[
            NotificationIntent(member_id, DELETION_CANCELLED, message)
            for member_id in project.members
            if member_id != request.removed_by
        ],
    )


# =================== COORDENADOR ===================

class DeletionCoordinator:
    """
    Executa o fluxo de exclusão sobre o armazenamento chave/valor

    Cada operação que altera dados é uma transação com a linha
    project:<id> travada, então pedidos simultâneos para o mesmo projeto
    são aplicados um depois do outro e a votação não perde atualizações.
    """

    def __init__(self, store: Optional[KeyValueStore] = None,
                 notifications: Optional[NotificationSink] = None):
        self.store = store or kv_store
        self.notifications = notifications or notification_sink

    def request_deletion(self, project_id: str, requester_id: str,
                         requester_name: str = '') -> Outcome:
        request = RequestDeletion(requester_id, requester_name, now_iso())
        return self._run(project_id, request)

    def force_delete(self, project_id: str, requester_id: str) -> Outcome:
        return self._run(project_id, ForceDelete(requester_id))

    def cast_vote(self, project_id: str, voter_id: str, approve,
                  voter_name: str = '') -> Outcome:
        return self._run(project_id, CastVote(voter_id, approve, voter_name))

    def member_removed(self, project_id: str, member_id: str,
                       removed_by: str) -> Optional[Outcome]:
        """
        Chamado depois que o membro já saiu do documento de projeto

        Deve rodar na mesma transação da remoção.
        """
        return self._run(project_id, MemberRemoved(member_id, removed_by))

    def get_vote_status(self, project_id: str, requester_id: str) -> VoteStatus:
        """Somente leitura - pode ser consultado à vontade"""
        project = self._load_project(project_id)
        _require_member(project, requester_id)

        vote = self._load_vote(project_id)
        if vote is None:
            return VoteStatus(in_progress=False)

        return VoteStatus(
            in_progress=True,
            votes=len(vote.votes),
            required=vote.required,
            has_voted=requester_id in vote.votes,
            incomplete_tasks=vote.incomplete_tasks,
        )

    # =================== MÉTODOS PRIVADOS ===================

    def _run(self, project_id: str, request: DeletionRequest) -> Optional[Outcome]:
        with transaction.atomic():
            project = self._load_project(project_id, for_update=True)
            task_set = self.store.get(tasks_key(project_id))
            vote = self._load_vote(project_id)

            try:
                decision = evaluate(project, task_set, vote, request)
            except PermissionDenied as exc:
                logger.warning("❌ %s recusado no projeto %s: %s",
                               type(request).__name__, project_id, exc.message)
                raise

            self._apply(project, decision)

        self._log_outcome(project, decision.outcome)
        return decision.outcome

    def _load_project(self, project_id: str, for_update: bool = False) -> Project:
        record = self.store.get(project_key(project_id), for_update=for_update)
        if not record:
            raise NotFound('Project not found')
        return Project.from_record(record)

    def _load_vote(self, project_id: str) -> Optional[DeletionVote]:
        record = self.store.get(deletion_vote_key(project_id))
        return DeletionVote.from_record(record) if record else None

    def _apply(self, project: Project, decision: Decision):
        if decision.finalize:
            self.store.delete(project_key(project.id))
            self.store.delete(tasks_key(project.id))
            self.store.delete(deletion_vote_key(project.id))
        elif decision.clear_vote:
            self.store.delete(deletion_vote_key(project.id))
        elif decision.vote is not None:
            self.store.set(deletion_vote_key(project.id), decision.vote.to_record())

        for intent in decision.notifications:
            self.notifications.create(intent.user_id, intent.type, intent.message, project.id)

    def _log_outcome(self, project: Project, outcome: Optional[Outcome]):
        if isinstance(outcome, Deleted):
            logger.info("🗑️ Projeto %s excluído", project.id)
        elif isinstance(outcome, ConfirmationRequired):
            logger.info("Projeto %s precisa de confirmação (%s tarefas pendentes)",
                        project.id, outcome.incomplete_tasks)
        elif isinstance(outcome, VoteOpened):
            logger.info("🗳️ Votação de exclusão aberta no projeto %s (%s/%s)",
                        project.id, outcome.votes, outcome.required)
        elif isinstance(outcome, VoteRecorded):
            logger.info("Votação de exclusão do projeto %s em %s/%s",
                        project.id, outcome.votes, outcome.required)
        elif isinstance(outcome, Rejected):
            logger.info("❌ Votação de exclusão do projeto %s rejeitada", project.id)
        elif isinstance(outcome, VoteCancelled):
            logger.info("Votação de exclusão do projeto %s cancelada - equipe alterada", project.id)


# Instância global do coordenador (Singleton pattern)
deletion_coordinator = DeletionCoordinator()
