# ABOUTME: Wires Settings into the HTTP client, metadata providers, resolver, cover fetcher, builder, and ledger.
# ABOUTME: Both the web endpoint and the CLI get their collaborators from here.

from dataclasses import dataclass

from bookdrop.config import Settings
from bookdrop.core.covers import CoverFetcher
from bookdrop.core.ledger import Ledger
from bookdrop.core.pipeline import GenerationResult, generate_epub
from bookdrop.core.workflow import Workflow
from bookdrop.formats.epub import EpubBuilder
from bookdrop.metadata.gemini import GeminiVisionProvider
from bookdrop.metadata.googlebooks import GoogleBooksProvider
from bookdrop.metadata.hardcover import HardcoverProvider
from bookdrop.metadata.http import BookdropHttpClient, HttpClient
from bookdrop.metadata.openlibrary import OpenLibraryProvider
from bookdrop.metadata.resolver import ResolutionEngine
from bookdrop.metadata.types import BookRecord


@dataclass
class Services:
    """Everything a request needs, built once per process."""

    settings: Settings
    engine: ResolutionEngine
    fetcher: CoverFetcher
    builder: EpubBuilder
    ledger: Ledger
    http_client: HttpClient | None = None

    def generate(self, record: BookRecord) -> GenerationResult:
        return generate_epub(record, fetcher=self.fetcher, builder=self.builder, ledger=self.ledger)

    def workflow(self) -> Workflow:
        return Workflow(self.engine, self.generate)

    def close(self) -> None:
        if isinstance(self.http_client, BookdropHttpClient):
            self.http_client.close()


def create_services(settings: Settings, http_client: HttpClient | None = None) -> Services:
    """Build the default service graph.

    Open Library is the primary ISBN source and Google Books the secondary.
    Title/author searches go to Open Library, then Hardcover.
    """
    if http_client is None:
        http_client = BookdropHttpClient(
            connect_timeout=settings.connect_timeout,
            request_timeout=settings.request_timeout,
        )

    open_library = OpenLibraryProvider(http_client)
    engine = ResolutionEngine(
        isbn_providers=[open_library, GoogleBooksProvider(http_client)],
        search_providers=[open_library, HardcoverProvider(http_client, settings.hardcover_token)],
        vision_provider=GeminiVisionProvider(
            http_client, settings.gemini_api_key, model=settings.gemini_model
        ),
    )
    return Services(
        settings=settings,
        engine=engine,
        fetcher=CoverFetcher(http_client),
        builder=EpubBuilder(settings.epub_dir),
        ledger=Ledger(settings.ledger_file),
        http_client=http_client,
    )
