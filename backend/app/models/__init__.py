# Importe tous les modèles pour enregistrer leurs tables dans Base.metadata
# avant que SQLAlchemy tente de résoudre les clés étrangères inter-modèles.
# Sans cet import, les FK comme classrooms.teacher_id → teachers.id échouent
# avec NoReferencedTableError si teacher.py n'est pas chargé avant classroom.py.

from app.models.teacher import Teacher  # noqa: F401  (doit précéder classroom)
from app.models.classroom import Classroom  # noqa: F401
from app.models.contest import Contest  # noqa: F401
from app.models.participant import Participant  # noqa: F401
from app.models.submission import Submission  # noqa: F401
from app.models.vote import Vote  # noqa: F401
