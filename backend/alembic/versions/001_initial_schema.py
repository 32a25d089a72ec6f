"""
Migration Alembic - Création initiale de la base de données
alembic/versions/001_initial_schema.py
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """
    Créer la table des agences et ses index
    """

    # ============================================================================
    # TABLE AGENCIAS
    # ============================================================================

    op.create_table(
        'agencias',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('pos_x', sa.Float(), nullable=False),
        sa.Column('pos_y', sa.Float(), nullable=False),
        sa.Column('nome', sa.String(length=100), nullable=True),
        sa.Column('data_criacao', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_agencias'),
    )

    # Index pour la recherche par position et par date
    op.create_index('idx_posicao', 'agencias', ['pos_x', 'pos_y'])
    op.create_index('idx_data_criacao', 'agencias', ['data_criacao'])


def downgrade():
    """
    Supprimer la table des agences
    """
    op.drop_index('idx_data_criacao', table_name='agencias')
    op.drop_index('idx_posicao', table_name='agencias')
    op.drop_table('agencias')
