"""MongoDB implementation of UserDirectory."""

from datetime import timezone
from logging import getLogger

from bson.codec_options import CodecOptions
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from domain.model.errors import DuplicateEmailError
from domain.model.user import Role, User

logger = getLogger(__name__)

USERS_COLLECTION_NAME = 'users'

# Datetimes come back UTC-aware, matching what the service writes
CODEC_OPTIONS = CodecOptions(tz_aware=True, tzinfo=timezone.utc)


class MongoUserDirectory:
    def __init__(self, db: Database, collection_name: str = USERS_COLLECTION_NAME):
        self.collection = db.get_collection(collection_name, codec_options=CODEC_OPTIONS)

    def ensure_indexes(self) -> bool:
        """Create the unique email index that backs duplicate-email detection."""
        try:
            self.collection.create_index([('email', 1)], name='idx_users_email', unique=True)
            self.collection.create_index([('created_at', -1)], name='idx_users_created_at')
            return True
        except PyMongoError as e:
            logger.error("Failed to create users indexes", extra={"error": str(e)})
            return False

    @staticmethod
    def _to_domain(doc: dict) -> User:
        """Convert MongoDB document to User domain model."""
        return User(
            id=doc['_id'],
            first_name=doc.get('first_name', ''),
            last_name=doc.get('last_name', ''),
            email=doc['email'],
            hashed_password=doc['hashed_password'],
            role=Role(doc.get('role', Role.GUEST.value)),
            created_at=doc['created_at'],
            updated_at=doc.get('updated_at'),
            birth_date=doc.get('birth_date'),
            last_login=doc.get('last_login'),
            jwt_token=doc.get('jwt_token'),
        )

    @staticmethod
    def _to_document(user: User) -> dict:
        return {
            '_id': user.id,
            'first_name': user.first_name,
            'last_name': user.last_name,
            'email': user.email,
            'hashed_password': user.hashed_password,
            'role': user.role.value,
            'created_at': user.created_at,
            'updated_at': user.updated_at,
            'birth_date': user.birth_date,
            'last_login': user.last_login,
            'jwt_token': user.jwt_token,
        }

    def create(self, user: User) -> User:
        """Insert a new user. DuplicateKeyError on email becomes DuplicateEmailError."""
        try:
            self.collection.insert_one(self._to_document(user))
        except DuplicateKeyError as e:
            logger.warning("User creation failed: email already exists", extra={"email": user.email})
            raise DuplicateEmailError(user.email) from e

        logger.debug("User inserted", extra={"userId": user.id})
        return user

    def get_by_email(self, email: str) -> User | None:
        doc = self.collection.find_one({'email': email})
        return self._to_domain(doc) if doc else None

    def get_by_id(self, user_id: str) -> User | None:
        doc = self.collection.find_one({'_id': user_id})
        return self._to_domain(doc) if doc else None

    def update(self, user_id: str, user: User) -> User:
        """Replace the whole document in a single atomic write."""
        document = self._to_document(user)
        document['_id'] = user_id
        try:
            self.collection.replace_one({'_id': user_id}, document)
        except DuplicateKeyError as e:
            logger.warning("User update failed: email already exists", extra={"userId": user_id})
            raise DuplicateEmailError(user.email) from e
        return user

    def delete(self, user_id: str) -> bool:
        result = self.collection.delete_one({'_id': user_id})
        return result.deleted_count > 0
