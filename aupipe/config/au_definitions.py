from typing import Dict

from ..core.models import ActionUnitDefinition

# 強度を出力するAU: (番号, 名称, 説明, 主な筋肉)
_CATALOG = (
    (1, "Inner Brow Raiser", "眉の内側を上げる", "Frontalis (pars medialis)"),
    (2, "Outer Brow Raiser", "眉の外側を上げる", "Frontalis (pars lateralis)"),
    (4, "Brow Lowerer", "眉を下げる・寄せる", "Corrugator supercilii"),
    (5, "Upper Lid Raiser", "上まぶたを上げる", "Levator palpebrae superioris"),
    (6, "Cheek Raiser", "頬を上げる", "Orbicularis oculi (pars orbitalis)"),
    (7, "Lid Tightener", "まぶたを締める", "Orbicularis oculi (pars palpebralis)"),
    (9, "Nose Wrinkler", "鼻にしわを寄せる", "Levator labii superioris alaeque nasi"),
    (10, "Upper Lip Raiser", "上唇を上げる", "Levator labii superioris"),
    (12, "Lip Corner Puller", "口角を引き上げる（笑顔）", "Zygomaticus major"),
    (14, "Dimpler", "口角を横に締める（えくぼ）", "Buccinator"),
    (15, "Lip Corner Depressor", "口角を下げる", "Depressor anguli oris"),
    (17, "Chin Raiser", "下唇と顎先を押し上げる", "Mentalis"),
    (20, "Lip Stretcher", "唇を横に伸ばす", "Risorius"),
    (23, "Lip Tightener", "唇を締める", "Orbicularis oris"),
    (25, "Lips Part", "唇を開く", "Depressor labii inferioris"),
    (26, "Jaw Drop", "顎を下げる", "Masseter (relaxed)"),
    (45, "Blink", "まばたき", "Orbicularis oculi"),
)

AU_DEFINITIONS: Dict[int, ActionUnitDefinition] = {
    number: ActionUnitDefinition(number, name, description, muscle)
    for number, name, description, muscle in _CATALOG
}

# 出力辞書のキー -> 定義
AU_BY_KEY: Dict[str, ActionUnitDefinition] = {au.key: au for au in AU_DEFINITIONS.values()}
