"""
Skill modifiers for block faces and injury rolls.

Skills come as two unordered sets, one per side. A skill is active iff it is
present in its side's set. Block-face transforms each fire off the face that
was actually rolled (they never chain); when two active skills claim the same
face the conflict is raised for the coach to resolve by hand.
"""
from dataclasses import dataclass, field
from typing import Iterable, Union

from ..core.data import BlockFace, RollModifiers, Skill, SkillSide
from ..core.errors import ConflictingSkillTransform, SkillUnavailable

SkillLike = Union[Skill, str]


def parse_skill(value: SkillLike) -> Skill:
    """Accept a Skill or a name such as "Mighty Blow", "mighty-blow" or "MIGHTY_BLOW"."""
    if isinstance(value, Skill):
        return value
    normalized = value.strip().replace("-", " ").replace("_", " ").lower()
    for skill in Skill:
        if skill.value.lower() == normalized:
            return skill
    raise ValueError(f"Unknown skill: {value!r}")


@dataclass(frozen=True)
class Skills:
    """Active skills for each side of the action."""
    attacker: frozenset[Skill] = field(default_factory=frozenset)
    defender: frozenset[Skill] = field(default_factory=frozenset)

    @classmethod
    def of(
        cls,
        attacker: Iterable[SkillLike] = (),
        defender: Iterable[SkillLike] = (),
    ) -> "Skills":
        """Build a skill set from skills or skill names."""
        return cls(
            attacker=frozenset(parse_skill(s) for s in attacker),
            defender=frozenset(parse_skill(s) for s in defender),
        )

    def side(self, side: SkillSide) -> frozenset[Skill]:
        return self.attacker if side == SkillSide.ATTACKER else self.defender

    def has(self, side: SkillSide, skill: Skill) -> bool:
        return skill in self.side(side)

    def describe(self) -> str:
        attacker = ", ".join(sorted(s.value for s in self.attacker)) or "none"
        defender = ", ".join(sorted(s.value for s in self.defender)) or "none"
        return f"attacker: {attacker}; defender: {defender}"


NO_SKILLS = Skills()


@dataclass(frozen=True)
class SkillTransformRule:
    """A skill that turns one rolled block face into another."""
    skill: Skill
    side: SkillSide
    from_face: BlockFace
    to_face: BlockFace
    description: str = ""

    def applies(self, face: BlockFace, skills: Skills) -> bool:
        return face == self.from_face and skills.has(self.side, self.skill)


DEFAULT_TRANSFORMS: tuple[SkillTransformRule, ...] = (
    SkillTransformRule(
        Skill.BLOCK, SkillSide.ATTACKER, BlockFace.BOTH_DOWN, BlockFace.PUSH,
        "Attacker ignores Both Down results",
    ),
    SkillTransformRule(
        Skill.WRESTLE, SkillSide.ATTACKER, BlockFace.PUSH, BlockFace.BOTH_DOWN,
        "Push becomes Both Down when attacking",
    ),
    SkillTransformRule(
        Skill.DODGE, SkillSide.DEFENDER, BlockFace.STUMBLE, BlockFace.PUSH,
        "Stumble becomes Push when defending",
    ),
)


def apply_skill_transforms(
    face: BlockFace,
    skills: Skills,
    rules: Iterable[SkillTransformRule] = DEFAULT_TRANSFORMS,
) -> BlockFace:
    """Resolve a rolled face against the active skills.

    Args:
        face: The face as rolled
        skills: Skills the coach chose to apply
        rules: Transform rules to consider

    Returns:
        The transformed face, or the rolled face when no skill applies

    Raises:
        ConflictingSkillTransform: If more than one active skill transforms the face
    """
    matching = [rule for rule in rules if rule.applies(face, skills)]
    if len(matching) > 1:
        raise ConflictingSkillTransform(face, [rule.skill.value for rule in matching])
    if matching:
        return matching[0].to_face
    return face


def check_piling_on(skills: Skills, already_used: bool) -> None:
    """Raise SkillUnavailable unless Piling On can be applied to this roll."""
    if not skills.has(SkillSide.ATTACKER, Skill.PILING_ON):
        raise SkillUnavailable("Piling On requested but the attacker does not have it")
    if already_used:
        raise SkillUnavailable("Piling On has already been applied during this action")


def armour_modifiers(skills: Skills, piling_on: bool = False) -> RollModifiers:
    """Modifiers for the armour roll.

    Thick Skull does not change the roll; it raises the effective armour value
    and is listed here so the coach sees it.
    """
    total = 0
    descriptions = []
    if skills.has(SkillSide.DEFENDER, Skill.THICK_SKULL):
        descriptions.append("Thick Skull: +1 to armour value")
    if piling_on:
        total += 1
        descriptions.append("Piling On: +1 to armour roll")
    return RollModifiers(total=total, descriptions=tuple(descriptions))


def injury_modifiers(skills: Skills, piling_on: bool = False) -> RollModifiers:
    """Modifiers for the injury roll."""
    total = 0
    descriptions = []
    if skills.has(SkillSide.ATTACKER, Skill.MIGHTY_BLOW):
        total += 1
        descriptions.append("Mighty Blow: +1 to injury roll")
    if piling_on:
        total += 1
        descriptions.append("Piling On: +1 to injury roll")
    return RollModifiers(total=total, descriptions=tuple(descriptions))


def casualty_modifiers(skills: Skills, niggling_injuries: int = 0) -> RollModifiers:
    """Modifiers for the casualty roll."""
    if niggling_injuries < 0:
        raise ValueError(f"Niggling injury count cannot be negative, got {niggling_injuries}")
    total = 0
    descriptions = []
    if skills.has(SkillSide.ATTACKER, Skill.MIGHTY_BLOW):
        total += 1
        descriptions.append("Mighty Blow: +1 to casualty roll")
    if skills.has(SkillSide.ATTACKER, Skill.DECAY):
        total += 1
        descriptions.append("Decay: +1 to casualty roll")
    if niggling_injuries:
        total += niggling_injuries
        descriptions.append(f"Niggling Injuries: +{niggling_injuries} to casualty roll")
    return RollModifiers(total=total, descriptions=tuple(descriptions))
