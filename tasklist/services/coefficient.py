"""
Coefficient engine - score d'une tâche et règles de l'arbre parent/enfants.

Le coefficient vaut priority + (5 - complexity) + (5 - length) :
plus il est élevé, plus la tâche est urgente à traiter.

Les trois facteurs sont bornés à [1, 5], donc le coefficient à [1, 13] :
- (priority=1, complexity=5, length=5) -> 1
- (priority=5, complexity=1, length=1) -> 13

Les règles d'arbre ne regardent que les enfants directs :
- une tâche ne peut être terminée que si tous ses enfants le sont
- une tâche ne peut être supprimée que si elle n'a aucun enfant

Aucune I/O ici : l'appelant charge les enfants et persiste le résultat
dans la même transaction.
"""

from typing import Iterable

MIN_FACTOR = 1
MAX_FACTOR = 5

# champs dont un changement impose de recalculer le coefficient
COEFFICIENT_FACTORS = ("priority", "complexity", "length")


class TaskRuleError(ValueError):
    """Base des refus métier : l'appelant corrige sa requête et réessaie."""


class InvalidInputRange(TaskRuleError):
    pass


class BlockedByIncompleteChildren(TaskRuleError):
    pass


class BlockedByExistingChildren(TaskRuleError):
    pass


def _check_factor(name: str, value) -> None:
    # bool est un int en Python, on le refuse explicitement
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputRange(f"{name} must be an integer between {MIN_FACTOR} and {MAX_FACTOR}")
    if not MIN_FACTOR <= value <= MAX_FACTOR:
        raise InvalidInputRange(f"{name} must be between {MIN_FACTOR} and {MAX_FACTOR}, got {value}")


def compute_coefficient(priority: int, complexity: int, length: int) -> int:
    _check_factor("priority", priority)
    _check_factor("complexity", complexity)
    _check_factor("length", length)
    return priority + (MAX_FACTOR - complexity) + (MAX_FACTOR - length)


def can_complete(task, children: Iterable) -> bool:
    """True si tous les enfants directs sont terminés (ou s'il n'y en a pas)."""
    return all(child.completed for child in children)


def can_delete(task, children: Iterable) -> bool:
    return not any(True for _ in children)


def ensure_can_complete(task, children: Iterable) -> None:
    if not can_complete(task, children):
        raise BlockedByIncompleteChildren("Cannot complete task: all subtasks must be completed first")


def ensure_can_delete(task, children: Iterable) -> None:
    if not can_delete(task, children):
        raise BlockedByExistingChildren("Cannot delete task: please delete all subtasks first")
