"""Professions accepted at registration and how their diploma is verified.

verification_method:
  dreets: diploma checked by the regional DREETS (regulator mail)
  rpps:   health professional, checked against the RPPS registry
  manual: checked by an admin only
"""

PROFESSIONS = [
    {'value': 'educator', 'label': 'Éducateur spécialisé', 'category': 'Éducatif',
     'requires_rpps': False, 'verification_method': 'dreets',
     'diplomas': ['DEES', 'CAFERUIS', 'OTHER'],
     'diploma_description': "Diplôme d'État d'Éducateur Spécialisé (DEES)"},
    {'value': 'moniteur_educateur', 'label': 'Moniteur éducateur', 'category': 'Éducatif',
     'requires_rpps': False, 'verification_method': 'dreets',
     'diplomas': ['DEME', 'OTHER'],
     'diploma_description': "Diplôme d'État de Moniteur Éducateur (DEME)"},
    {'value': 'psychologist', 'label': 'Psychologue', 'category': 'Psychologie',
     'requires_rpps': True, 'verification_method': 'rpps',
     'diplomas': ['MASTER_PSY', 'OTHER'],
     'diploma_description': 'Master 2 Psychologie'},
    {'value': 'psychiatrist', 'label': 'Psychiatre', 'category': 'Psychologie',
     'requires_rpps': True, 'verification_method': 'rpps',
     'diplomas': ['DES_PSYCHIATRIE', 'OTHER'],
     'diploma_description': 'DES de Psychiatrie'},
    {'value': 'child_psychiatrist', 'label': 'Pédopsychiatre', 'category': 'Psychologie',
     'requires_rpps': True, 'verification_method': 'rpps',
     'diplomas': ['DES_PSYCHIATRIE', 'OTHER'],
     'diploma_description': 'DES de Psychiatrie'},
    {'value': 'psychomotricist', 'label': 'Psychomotricien', 'category': 'Thérapies',
     'requires_rpps': True, 'verification_method': 'rpps',
     'diplomas': ['DE_PSYCHOMOT', 'OTHER'],
     'diploma_description': "Diplôme d'État de Psychomotricien"},
    {'value': 'occupational_therapist', 'label': 'Ergothérapeute', 'category': 'Thérapies',
     'requires_rpps': True, 'verification_method': 'rpps',
     'diplomas': ['DE_ERGO', 'OTHER'],
     'diploma_description': "Diplôme d'État d'Ergothérapeute"},
    {'value': 'speech_therapist', 'label': 'Orthophoniste', 'category': 'Thérapies',
     'requires_rpps': True, 'verification_method': 'rpps',
     'diplomas': ['CCO', 'OTHER'],
     'diploma_description': "Certificat de Capacité d'Orthophoniste (CCO)"},
    {'value': 'physiotherapist', 'label': 'Kinésithérapeute', 'category': 'Thérapies',
     'requires_rpps': True, 'verification_method': 'rpps',
     'diplomas': ['DE_KINE', 'OTHER'],
     'diploma_description': "Diplôme d'État de Masseur-Kinésithérapeute"},
    {'value': 'apa_teacher', 'label': 'Enseignant APA', 'category': 'Autres',
     'requires_rpps': False, 'verification_method': 'manual',
     'diplomas': ['LICENCE_STAPS_APA', 'MASTER_STAPS_APA', 'OTHER'],
     'diploma_description': 'Licence ou Master STAPS mention APA-S'},
    {'value': 'music_therapist', 'label': 'Musicothérapeute', 'category': 'Autres',
     'requires_rpps': False, 'verification_method': 'manual',
     'diplomas': ['DU_MUSICOTHERAPIE', 'CERTIFICATION_MUSICOTHERAPIE', 'OTHER'],
     'diploma_description': 'DU Musicothérapie ou certification équivalente'},
]

_BY_VALUE = {p['value']: p for p in PROFESSIONS}

PROFESSION_CHOICES = [(p['value'], p['label']) for p in PROFESSIONS]


def get_profession(value):
    return _BY_VALUE.get(value)


def requires_dreets_verification(value):
    profession = get_profession(value)
    return bool(profession) and profession['verification_method'] == 'dreets'
