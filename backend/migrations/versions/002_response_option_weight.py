"""poids d'option figé sur la réponse

Revision ID: 002_response_option_weight
Revises: 001_initial
Create Date: 19/10/2026
"""
from alembic import op
import sqlalchemy as sa

revision = '002_response_option_weight'
down_revision = '001_initial'


def upgrade() -> None:
    op.add_column("responses", sa.Column("option_weight", sa.Float, nullable=True))


def downgrade() -> None:
    op.drop_column("responses", "option_weight")
