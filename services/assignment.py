"""
Assignment Engine.

Turns the best user-owned match of each indexed face into one of:

    no match                       -> needs input, no suggestions
    >= auto threshold, person      -> auto-assigned (link by 'system')
    >= auto threshold, no person   -> needs input with suggestions
    floor <= similarity < auto     -> needs input with suggestions
    below floor                    -> needs input, no suggestions

and owns the user-driven transitions (assign, unassign, skip, create a
person from a face, search again for an indexed face). The face row is
always written before its link.
"""

from enum import Enum
from typing import List, Optional

from core.exceptions import ConflictError, FaceNotFoundError, NotFoundError
from core.logging import get_logger
from models.domain.link import AssignedBy
from models.domain.person import Person
from models.domain.recognition import FaceMatch, FaceWithMatches
from models.responses.faces import (
    AssignConflict,
    AssignNotFound,
    AssignOutcome,
    AssignSuccess,
    AutoAssigned,
    CreatedPerson,
    FaceOutcome,
    FaceView,
    LinkView,
    NeedsUserInput,
    PersonCandidate,
    PersonView,
    RematchResult,
    Suggestion,
)
from repositories.faces_repo import FacesRepository
from repositories.links_repo import LinksRepository
from repositories.people_repo import PeopleRepository
from repositories.assets_repo import AssetsRepository
from repositories.collections_repo import CollectionsRepository
from services.match_resolver import MatchResolver
from services.people import PeopleService

logger = get_logger(__name__)


class MatchTier(str, Enum):
    NONE = "none"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def classify_similarity(
    best_similarity: Optional[float],
    auto_threshold: float = 95.0,
    floor: float = 80.0,
) -> MatchTier:
    """Bucket the best similarity (percent). Both bounds are inclusive."""
    if best_similarity is None:
        return MatchTier.NONE
    if best_similarity >= auto_threshold:
        return MatchTier.HIGH
    if best_similarity >= floor:
        return MatchTier.MEDIUM
    return MatchTier.LOW


class AssignmentEngine:
    def __init__(
        self,
        faces: FacesRepository,
        people: PeopleRepository,
        links: LinksRepository,
        assets: AssetsRepository,
        people_service: PeopleService,
        auto_assign_similarity: float = 95.0,
        similarity_floor: float = 80.0,
        max_suggestions: int = 3,
        resolver: Optional[MatchResolver] = None,
        collections: Optional[CollectionsRepository] = None,
        rematch_min_matches: int = 2,
        rematch_single_similarity: float = 97.0,
    ):
        self.faces = faces
        self.people = people
        self.links = links
        self.assets = assets
        self.people_service = people_service
        self.auto_assign_similarity = auto_assign_similarity
        self.similarity_floor = similarity_floor
        self.max_suggestions = max_suggestions
        self.resolver = resolver
        self.collections = collections
        self.rematch_min_matches = rematch_min_matches
        self.rematch_single_similarity = rematch_single_similarity

    # ============================================================
    # Automatic pipeline
    # ============================================================

    async def resolve_person(self, user_id: str, provider_face_id: str) -> Optional[Person]:
        """
        Person behind a matched face, through that face's own active link.
        A matched face with no person of its own resolves to None.
        """
        face = await self.faces.get_by_provider_id(user_id, provider_face_id)
        if face is None:
            return None
        link = await self.links.get_active_for_face(face.id)
        if link is None:
            return None
        return await self.people.get_owned(link.person_id, user_id)

    async def suggest_people(self, user_id: str, matches: List[FaceMatch]) -> List[Suggestion]:
        """People behind the top matches, in match order, unresolvable ones skipped."""
        suggestions = []
        for match in matches[:self.max_suggestions]:
            person = await self.resolve_person(user_id, match.face_id)
            if person is None:
                continue
            suggestions.append(Suggestion(
                person=PersonView.from_person(person),
                similarity=match.similarity,
                face_id=match.face_id,
            ))
        return suggestions

    async def process_face(
        self,
        user_id: str,
        asset_id: str,
        candidate: FaceWithMatches,
    ) -> FaceOutcome:
        """Persist one indexed face and decide its assignment."""
        best = candidate.best_match
        tier = classify_similarity(
            best.similarity if best else None,
            self.auto_assign_similarity,
            self.similarity_floor,
        )
        face_id = candidate.face.provider_face_id

        if tier is MatchTier.HIGH:
            person = await self.resolve_person(user_id, best.face_id)
            if person is not None:
                return await self._auto_assign(user_id, asset_id, candidate, person, best.similarity)
            logger.info(f"Face {face_id}: {best.similarity:.1f}% match has no person, asking user")
            return await self._needs_input(user_id, asset_id, candidate, with_suggestions=True)

        if tier is MatchTier.MEDIUM:
            logger.info(f"Face {face_id} needs confirmation (similarity {best.similarity:.1f}%)")
            return await self._needs_input(user_id, asset_id, candidate, with_suggestions=True)

        # NONE and LOW: treated as a new face
        return await self._needs_input(user_id, asset_id, candidate, with_suggestions=False)

    async def _auto_assign(self, user_id, asset_id, candidate, person, similarity) -> AutoAssigned:
        stored = await self.faces.save_face(
            user_id, asset_id, candidate.face, needs_assignment=False, auto_assigned=True
        )
        try:
            await self.links.create_link(stored.id, person.id, similarity / 100, AssignedBy.SYSTEM)
        except Exception:
            # Face must not claim an assignment it does not have
            await self.faces.update_flags(stored.id, needs_assignment=True, auto_assigned=False)
            raise

        logger.info(f"Auto-assigned face {stored.id} to {person.name} ({similarity:.1f}%)")
        return AutoAssigned(
            face=FaceView.from_face(stored),
            person=PersonView.from_person(person),
            similarity=similarity,
        )

    async def _needs_input(self, user_id, asset_id, candidate, with_suggestions: bool) -> NeedsUserInput:
        stored = await self.faces.save_face(
            user_id, asset_id, candidate.face, needs_assignment=True, auto_assigned=False
        )
        suggestions = []
        if with_suggestions:
            suggestions = await self.suggest_people(user_id, candidate.matches)
        logger.info(f"Face {stored.id} needs user input ({len(suggestions)} suggestions)")
        return NeedsUserInput(face=FaceView.from_face(stored), suggestions=suggestions)

    # ============================================================
    # User-driven transitions
    # ============================================================

    async def assign(
        self,
        user_id: str,
        face_id: str,
        person_id: str,
        confidence: float = 1.0,
        assigned_by: AssignedBy = AssignedBy.USER,
    ) -> AssignOutcome:
        """Link a face to a person, replacing any previous link."""
        face = await self.faces.get_owned(face_id, user_id)
        if face is None:
            return AssignNotFound(entity="face", identifier=face_id)

        person = await self.people.get_owned(person_id, user_id)
        if person is None:
            return AssignNotFound(entity="person", identifier=person_id)

        current = await self.links.get_active_for_face(face_id)
        if current is not None and current.person_id == person_id:
            return AssignConflict(face_id=face_id, person_id=person_id)

        link = await self._replace_link(face_id, person_id, confidence, assigned_by)
        await self.faces.update_flags(
            face_id,
            needs_assignment=False,
            auto_assigned=assigned_by == AssignedBy.SYSTEM,
            skipped=False,
        )

        logger.info(f"Assigned face {face_id} to person {person.name} for user {user_id}")
        return AssignSuccess(link=LinkView.from_link(link), person=PersonView.from_person(person))

    async def _replace_link(self, face_id, person_id, confidence, assigned_by):
        """
        Insert the new link, then retire the face's other links. The old
        link stays active until the new one exists.
        """
        link = await self.links.create_link(face_id, person_id, confidence, assigned_by)
        try:
            retired = await self.links.retire_for_face(face_id, keep_link_id=link.id)
        except Exception:
            await self.links.soft_delete(link.id)
            raise
        if retired:
            logger.debug(f"Retired {retired} previous link(s) for face {face_id}")
        return link

    async def unassign(self, user_id: str, face_id: str) -> FaceView:
        face = await self.faces.get_owned(face_id, user_id)
        if face is None:
            raise FaceNotFoundError(face_id)

        await self.links.retire_for_face(face_id)
        updated = await self.faces.update_flags(
            face_id, needs_assignment=True, auto_assigned=False, skipped=False
        )
        logger.info(f"Assignment removed for face {face_id}")
        return FaceView.from_face(updated)

    async def skip(self, user_id: str, face_id: str) -> FaceView:
        """Permanently ignore a face. Links are left as they are."""
        face = await self.faces.get_owned(face_id, user_id)
        if face is None:
            raise FaceNotFoundError(face_id)

        updated = await self.faces.update_flags(face_id, skipped=True, needs_assignment=False)
        logger.info(f"Face {face_id} permanently skipped")
        return FaceView.from_face(updated)

    async def create_person_from_face(
        self,
        user_id: str,
        face_id: str,
        name: str,
        display_name: Optional[str] = None,
        relationship: Optional[str] = None,
    ) -> CreatedPerson:
        """
        Create a person and link the face to it. If the link cannot be
        created the new person is soft-deleted before the error propagates.
        """
        face = await self.faces.get_owned(face_id, user_id)
        if face is None:
            raise FaceNotFoundError(face_id)

        person = await self.people_service.create_person(
            user_id, name, display_name=display_name, relationship=relationship
        )

        try:
            link = await self._replace_link(face_id, person.id, 1.0, AssignedBy.USER)
        except Exception:
            logger.error(f"Linking face {face_id} failed, rolling back person {person.id}")
            await self.people.soft_delete(person.id)
            raise

        await self.faces.update_flags(face_id, needs_assignment=False, auto_assigned=False, skipped=False)
        person = await self.people.set_avatar(person.id, face_id)

        logger.info(f"Face {face_id} assigned to new person {person.name}")
        return CreatedPerson(person=PersonView.from_person(person), face_id=face_id, link_id=link.id)

    async def list_unassigned(self, user_id: str, limit: int = 50) -> List[FaceView]:
        """Faces awaiting a decision, newest first, with photo display fields."""
        faces = await self.faces.list_unassigned(user_id, limit)
        assets = await self.assets.get_many([f.asset_id for f in faces])
        return [FaceView.from_face(face, assets.get(face.asset_id)) for face in faces]

    # ============================================================
    # Re-search of an indexed face
    # ============================================================

    async def group_by_person(self, user_id: str, matches: List[FaceMatch]) -> List[PersonCandidate]:
        """Fold matches into one candidate per resolvable person, strongest first."""
        grouped = {}
        similarities = {}
        for match in matches:
            person = await self.resolve_person(user_id, match.face_id)
            if person is None:
                continue
            if person.id not in grouped:
                grouped[person.id] = PersonCandidate(person=PersonView.from_person(person))
                similarities[person.id] = []
            similarities[person.id].append(match.similarity)

        for person_id, candidate in grouped.items():
            values = similarities[person_id]
            candidate.match_count = len(values)
            candidate.max_similarity = max(values)
            candidate.average_similarity = round(sum(values) / len(values), 2)

        return sorted(grouped.values(), key=lambda c: c.max_similarity, reverse=True)

    def should_auto_assign(self, candidate: PersonCandidate) -> bool:
        """Several strong matches, or one very strong one."""
        if candidate.max_similarity >= self.rematch_single_similarity:
            return True
        return (
            candidate.max_similarity >= self.auto_assign_similarity
            and candidate.match_count >= self.rematch_min_matches
        )

    async def rematch(self, user_id: str, face_id: str) -> RematchResult:
        """
        Search the collection again for a face that is already indexed but
        has no person, and assign it when one person clearly wins.

        Raises:
            FaceNotFoundError: face is not an active face of user_id
            ConflictError: face already has an active link
            NotFoundError: user has no collection yet
        """
        face = await self.faces.get_owned(face_id, user_id)
        if face is None:
            raise FaceNotFoundError(face_id)

        current = await self.links.get_active_for_face(face_id)
        if current is not None:
            raise ConflictError(
                "Face is already assigned to a person",
                details={"faceId": face_id, "personId": current.person_id},
            )

        collection = await self.collections.get_for_user(user_id)
        if collection is None:
            raise NotFoundError("Collection")

        matches = await self.resolver.find_matches(collection.collection_id, face.provider_face_id, user_id)
        candidates = await self.group_by_person(user_id, matches)
        logger.info(f"Face {face_id}: {len(matches)} matches, {len(candidates)} candidate people")

        best = candidates[0] if candidates else None
        if best is not None and self.should_auto_assign(best):
            await self._replace_link(face_id, best.person.id, best.max_similarity / 100, AssignedBy.SYSTEM)
            updated = await self.faces.update_flags(
                face_id, needs_assignment=False, auto_assigned=True, skipped=False
            )
            logger.info(
                f"Auto-assigned face {face_id} to {best.person.name} "
                f"({best.max_similarity:.1f}%, {best.match_count} match(es))"
            )
            return RematchResult(
                action="auto_assigned",
                face=FaceView.from_face(updated),
                person=best.person,
                similarity=best.max_similarity,
                match_count=len(matches),
                candidates=candidates,
            )

        assets = await self.assets.get_many([face.asset_id])
        return RematchResult(
            action="needs_user_input",
            face=FaceView.from_face(face, assets.get(face.asset_id)),
            match_count=len(matches),
            candidates=candidates,
        )
