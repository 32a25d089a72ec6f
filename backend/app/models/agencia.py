"""
Modèle Agencia
Une agence est un point (pos_x, pos_y) enregistré avec un nom dérivé de son id
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Float, Index, Integer, String
from sqlalchemy.orm import validates

from app.core.database import Base


class Agencia(Base):
    """
    Agence enregistrée
    Jamais mise à jour après création : nom et date de création sont figés
    """
    __tablename__ = "agencias"

    id = Column(Integer, primary_key=True, autoincrement=True)
    pos_x = Column(Float, nullable=False)
    pos_y = Column(Float, nullable=False)
    nome = Column(String(100), nullable=True)
    data_criacao = Column(DateTime, nullable=False, default=datetime.now)

    __table_args__ = (
        Index("idx_posicao", "pos_x", "pos_y"),
        Index("idx_data_criacao", "data_criacao"),
    )

    @validates("nome", "data_criacao")
    def validate_immutable(self, key, value):
        current = getattr(self, key)
        if current is not None and value != current:
            raise ValueError(f"Le champ '{key}' d'une agence ne peut pas être modifié")
        return value

    def __repr__(self):
        return f"<Agencia(id={self.id}, nome='{self.nome}', pos=({self.pos_x}, {self.pos_y}))>"
