"""Vector store of employee records.

This module stores employee records in Qdrant, one point per employee,
embedding the natural-language summary of each record so that the agent
can look employees up with free-text similarity search.
"""

import logging
import uuid
from datetime import datetime, timezone

from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings
from langchain_ollama import OllamaEmbeddings
from langchain_openai import OpenAIEmbeddings
from qdrant_client import QdrantClient
from qdrant_client.models import Distance, PointStruct, VectorParams

from hr_agent_config import get_settings

from .employees import Employee, create_employee_summary

logger = logging.getLogger(__name__)

TEXT_KEY = "embedding_text"
MAX_SEARCH_RESULTS = 50


def get_embeddings() -> Embeddings:
    """Get environment-aware embeddings model.

    Returns Ollama embeddings in development and OpenAI embeddings in
    production.

    Returns:
        OllamaEmbeddings or OpenAIEmbeddings instance
    """
    settings = get_settings()

    if settings.llm.is_local:
        logger.info("Using Ollama embeddings for development")
        return OllamaEmbeddings(
            base_url=settings.llm.ollama_base_url,
            model=settings.llm.embedding_model_name
        )

    logger.info("Using OpenAI embeddings for production")
    return OpenAIEmbeddings(
        api_key=settings.llm.openai_api_key,
        model=settings.llm.embedding_model_name
    )


class EmployeeStore:
    """Qdrant-backed store for employee records.

    Each point carries the full employee record in its payload, together
    with the embedded summary text and a creation timestamp. Point IDs are
    derived from employee_id, so re-adding an employee overwrites it.
    """

    def __init__(
        self,
        client: QdrantClient | None = None,
        embeddings: Embeddings | None = None
    ):
        """Initialize the store and ensure the collection exists.

        Args:
            client: Qdrant client (defaults to one built from settings)
            embeddings: Embeddings model (defaults to get_embeddings())
        """
        self.settings = get_settings()
        self.collection_name = self.settings.qdrant.collection_name
        self.qdrant = client or QdrantClient(url=self.settings.qdrant.url)
        self.embeddings = embeddings or get_embeddings()

        self.ensure_collection()

        logger.info(f"EmployeeStore initialized (collection: {self.collection_name})")

    def ensure_collection(self) -> None:
        """Create the collection if it does not exist.

        The vector size is taken from a probe embedding. Uses cosine
        distance for similarity.
        """
        collections = self.qdrant.get_collections()
        collection_names = [col.name for col in collections.collections]

        if self.collection_name in collection_names:
            logger.debug(f"Collection already exists: {self.collection_name}")
            return

        dimension = len(self.embeddings.embed_query("test"))
        logger.info(f"Creating Qdrant collection {self.collection_name} (dimension {dimension})")

        self.qdrant.create_collection(
            collection_name=self.collection_name,
            vectors_config=VectorParams(size=dimension, distance=Distance.COSINE)
        )

    def clear(self) -> None:
        """Delete every employee record by recreating the collection."""
        logger.info(f"Clearing collection {self.collection_name}")
        self.qdrant.delete_collection(collection_name=self.collection_name)
        self.ensure_collection()

    def count(self) -> int:
        """Count stored employee records.

        Returns:
            Number of points in the collection
        """
        return self.qdrant.count(collection_name=self.collection_name).count

    def add_employee(self, employee: Employee) -> str:
        """Embed and store a single employee record.

        Args:
            employee: Validated employee record

        Returns:
            Qdrant point ID of the stored record

        Raises:
            Exception: If embedding generation or Qdrant storage fails
        """
        summary = create_employee_summary(employee)
        vector = self.embeddings.embed_query(summary)
        point_id = str(uuid.uuid5(uuid.NAMESPACE_DNS, employee.employee_id))

        payload = employee.model_dump(mode="json")
        payload[TEXT_KEY] = summary
        payload["created_at"] = datetime.now(timezone.utc).isoformat()

        self.qdrant.upsert(
            collection_name=self.collection_name,
            points=[PointStruct(id=point_id, vector=vector, payload=payload)]
        )

        logger.info(f"Stored employee {employee.employee_id}")
        return point_id

    def search(self, query: str, n: int = 10) -> list[tuple[Document, float]]:
        """Find employees most similar to a free-text query.

        Args:
            query: Search text
            n: Number of results to return (1-50)

        Returns:
            List of (Document, score) pairs ordered by descending score.
            Each Document holds the summary as page_content and the employee
            record (plus created_at) as metadata.

        Raises:
            ValueError: If query is empty or n is out of range
        """
        if not query or not query.strip():
            raise ValueError("Query cannot be empty")

        if n < 1 or n > MAX_SEARCH_RESULTS:
            raise ValueError(f"n must be between 1 and {MAX_SEARCH_RESULTS}, got {n}")

        logger.info(f"Searching employees for: {query[:50]}... (n={n})")

        query_embedding = self.embeddings.embed_query(query)
        results = self.qdrant.query_points(
            collection_name=self.collection_name,
            query=query_embedding,
            limit=n
        ).points

        matches = []
        for result in results:
            payload = dict(result.payload)
            text = payload.pop(TEXT_KEY, "")
            matches.append((Document(page_content=text, metadata=payload), result.score))

        logger.info(f"Found {len(matches)} matching employees")
        return matches
