# apps/projects/urls.py

from django.urls import path
from . import views

app_name = 'projects'

urlpatterns = [
    # === PROJETOS ===
    path('projects', views.projects, name='projects'),

    # === EQUIPE ===
    path('projects/<str:project_id>/members', views.members, name='members'),
    path('projects/<str:project_id>/members/<str:member_id>', views.remove_member, name='remove_member'),
    path('projects/<str:project_id>/invite', views.invite, name='invite'),
    path('pending-invitations', views.pending_invitations, name='pending_invitations'),
    path('invitations/<str:invitation_id>/accept', views.accept_invitation, name='accept_invitation'),
    path('invitations/<str:invitation_id>/decline', views.decline_invitation, name='decline_invitation'),

    # === EXCLUSÃO & VOTAÇÃO ===
    path('projects/<str:project_id>/delete-request', views.delete_request, name='delete_request'),
    path('projects/<str:project_id>/force', views.force_delete, name='force_delete'),
    path('projects/<str:project_id>/vote-delete', views.vote_delete, name='vote_delete'),
    path('projects/<str:project_id>/deletion-vote', views.deletion_vote_status, name='deletion_vote'),
]
