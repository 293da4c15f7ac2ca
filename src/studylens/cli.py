import typer
import os
import asyncio
from typing import Optional
import logging
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .processing_service import StudyGuideService
from .models import ProcessingStep, StudyGuideRequest
from .exporter import StudyGuideExporter
from .settings import get_settings

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Initialize Typer app
app = typer.Typer(
    name="studylens",
    help="Turn slide decks and PDFs into bilingual study guides using AI",
    add_completion=False
)

# Initialize console for rich output
console = Console()


@app.command()
def process(
    document_path: str = typer.Argument(..., help="Path to the PDF or PPTX file to process"),
    output_dir: Optional[str] = typer.Option(None, "--output", "-o", help="Output directory for generated study guides"),
    chunk_size: Optional[int] = typer.Option(None, "--chunk-size", min=1, help="Maximum characters per part sent to the model"),
    provider: Optional[str] = typer.Option(None, "--provider", help="Generation backend: ollama or gemini"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging")
):
    """Process a document and generate a study guide"""

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    # Validate inputs
    if not os.path.exists(document_path):
        console.print(f"[red]Error: File not found: {document_path}[/red]")
        raise typer.Exit(1)

    overrides = {}
    if output_dir:
        overrides["output_dir"] = output_dir
    if chunk_size:
        overrides["chunk_size"] = chunk_size
    if provider:
        if provider not in ("ollama", "gemini"):
            console.print(f"[red]Error: Unknown provider: {provider} (use ollama or gemini)[/red]")
            raise typer.Exit(1)
        overrides["llm_provider"] = provider
    settings = get_settings().model_copy(update=overrides)

    # Initialize services
    try:
        service = StudyGuideService(settings=settings)
    except Exception as e:
        console.print(f"[red]Error initializing services: {str(e)}[/red]")
        raise typer.Exit(1)

    request = StudyGuideRequest(document_path=document_path, chunk_size=settings.chunk_size)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console
    ) as progress:
        task = progress.add_task("Starting...", total=None)

        def on_step(step: ProcessingStep, message: str):
            if message and step in (ProcessingStep.PARSING, ProcessingStep.GENERATING):
                progress.update(task, description=message)

        response = asyncio.run(service.process_document(request, progress=on_step))

    if not response.success:
        console.print(f"[red]Error: {response.message}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✓ {response.message} in {response.processing_time:.2f} seconds[/green]")
    if response.chunks_failed:
        console.print(f"[yellow]! {response.chunks_failed}/{response.chunks_attempted} parts were skipped[/yellow]")

    document = response.study_document
    display_document_summary(document)
    console.print(f"[green]✓ Study guide saved to: {service.output_dir / (document.title + '.json')}[/green]")
    display_statistics(StudyGuideExporter().get_statistics(document))


@app.command()
def sections(
    json_file: str = typer.Argument(..., help="Path to the study guide JSON file")
):
    """List sections from a generated study guide"""

    if not os.path.exists(json_file):
        console.print(f"[red]Error: File not found: {json_file}[/red]")
        raise typer.Exit(1)

    try:
        document = StudyGuideExporter().load_from_json(json_file)
    except Exception as e:
        console.print(f"[red]Error loading study guide: {str(e)}[/red]")
        raise typer.Exit(1)

    display_section_list(document)


@app.command()
def stats(
    json_file: str = typer.Argument(..., help="Path to the study guide JSON file")
):
    """Show statistics for a study guide"""

    if not os.path.exists(json_file):
        console.print(f"[red]Error: File not found: {json_file}[/red]")
        raise typer.Exit(1)

    try:
        exporter = StudyGuideExporter()
        document = exporter.load_from_json(json_file)
    except Exception as e:
        console.print(f"[red]Error loading study guide: {str(e)}[/red]")
        raise typer.Exit(1)

    display_statistics(exporter.get_statistics(document))


def display_document_summary(document):
    """Display a summary of the study guide"""
    console.print(f"\n[bold blue]Study Guide: {document.title}[/bold blue]")
    console.print(f"[dim]Source: {document.source_document}[/dim]")
    console.print(f"[dim]Created: {document.created_at}[/dim]")
    console.print(f"[dim]Total sections: {len(document.sections)}[/dim]\n")


def display_section_list(document):
    """Display a list of all sections"""
    console.print(f"\n[bold blue]Study Guide: {document.title}[/bold blue]\n")

    for i, section in enumerate(document.sections, 1):
        console.print(f"[bold]{i}. {section.topic}[/bold]")
        console.print(f"   Points: {len(section.content)}  Questions: {len(section.questions)}  Images: {len(section.images)}")

        for point in section.content[:2]:
            console.print(f"   • {point.english[:100]}{'...' if len(point.english) > 100 else ''}")
            console.print(f"     {point.chinese[:60]}{'...' if len(point.chinese) > 60 else ''}")
        if len(section.content) > 2:
            console.print(f"   ... and {len(section.content) - 2} more")

        console.print()


def display_statistics(stats):
    """Display study guide statistics"""
    table = Table(title="Study Guide Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="magenta")

    table.add_row("Total Sections", str(stats["total_sections"]))
    table.add_row("Content Points", str(stats["total_points"]))
    table.add_row("Key Terms", str(stats["key_terms"]))
    table.add_row("Exam Questions", str(stats["total_questions"]))
    table.add_row("Sections with Images", str(stats["sections_with_images"]))
    table.add_row("Total Images", str(stats["total_images"]))
    table.add_row("Avg Points per Section", f"{stats['average_points_per_section']:.1f}")

    console.print(table)


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Host to bind the server to"),
    port: int = typer.Option(8000, "--port", help="Port to bind the server to")
):
    """Start the FastAPI server"""

    console.print(f"[green]Starting server on {host}:{port}[/green]")

    import uvicorn
    uvicorn.run("src.studylens.api:app", host=host, port=port, reload=True)


if __name__ == "__main__":
    app()
