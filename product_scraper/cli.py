import click
import logging
import traceback
import pydantic
from tabulate import tabulate

from product_scraper.config.scraper_config import ScraperConfig
from product_scraper.config.settings import get_settings
from product_scraper.core.card_filter import build_predicate
from product_scraper.core.errors import (
    FetchError,
    NoMatchError,
    OperationCancelled,
    ScraperError,
    SearchEngineError,
    SelectionError,
)
from product_scraper.core.models import BasicInfo
from product_scraper.core.scraper import ProductScraper

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("product-scraper-cli")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    default=settings.CONFIG_PATH,
    show_default=True,
    help="Site configuration file (JSON)",
)
@click.pass_context
def cli(ctx, verbose, config_path):
    """Product data scraper for e-commerce websites."""
    # Store options in the Click context instead of global variables
    ctx.ensure_object(dict)
    ctx.obj["VERBOSE"] = verbose
    ctx.obj["CONFIG_PATH"] = config_path

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Debug logging enabled")


def get_scraper(ctx) -> ProductScraper:
    """Build the scraper once per invocation from the configured file."""
    if "SCRAPER" not in ctx.obj:
        ctx.obj["SCRAPER"] = ProductScraper(ScraperConfig.from_file(ctx.obj["CONFIG_PATH"]))
    return ctx.obj["SCRAPER"]


def report_error(ctx, error):
    """Print an error the way users can act on it and exit with status 1."""
    if isinstance(error, pydantic.ValidationError):
        click.echo(f"Configuration error: {error}")
    elif isinstance(error, NoMatchError):
        click.echo(f"No match: {error}")
    elif isinstance(error, SearchEngineError):
        click.echo(f"Search error: {error}")
        click.echo("The site search returned nothing. Check the search pagination and list selectors.")
    elif isinstance(error, FetchError):
        click.echo(f"Network error: {error}")
    elif isinstance(error, SelectionError):
        click.echo(f"Selection error: {error}")
        click.echo("A selector matched nothing or selections disagree. Check the site configuration.")
    elif isinstance(error, OperationCancelled):
        click.echo("Operation aborted.")
    elif isinstance(error, OSError):
        click.echo(f"System error: {error}")
    else:
        click.echo(f"Error: {error}")

    # Always show traceback in verbose mode
    if ctx.obj["VERBOSE"]:
        click.echo(traceback.format_exc())
    ctx.exit(1)


CLI_ERRORS = (ScraperError, pydantic.ValidationError, OSError)


@cli.command()
@click.argument("name")
@click.option("--brand", "-b", help="Product brand, narrows the match")
@click.option("--url", "-u", help="Known product page URL, returned without searching")
@click.pass_context
def resolve(ctx, name, brand, url):
    """Find the product page URL of NAME through the site search."""
    try:
        product_url = get_scraper(ctx).search_product(BasicInfo(name=name, brand=brand, url=url))
    except CLI_ERRORS as e:
        report_error(ctx, e)
        return
    click.echo(product_url)


@cli.command("card-data")
@click.argument("name")
@click.option("--brand", "-b", help="Product brand, narrows the match")
@click.option("--url", "-u", help="Known product page URL, skips the search")
@click.pass_context
def card_data(ctx, name, brand, url):
    """Show images and description of the product NAME."""
    try:
        data = get_scraper(ctx).search_product_card_data(BasicInfo(name=name, brand=brand, url=url))
    except CLI_ERRORS as e:
        report_error(ctx, e)
        return

    click.echo("Images:")
    for i, image_url in enumerate(data.image_urls, 1):
        click.echo(f"{i}. {image_url}")
    click.echo("\nDescription:")
    click.echo(data.description)


@cli.command()
@click.argument("url")
@click.pass_context
def product(ctx, url):
    """Scrape the product page at URL."""
    try:
        page = get_scraper(ctx).scrape_product(url)
    except CLI_ERRORS as e:
        report_error(ctx, e)
        return

    rows = [
        ["Name", page.name or ""],
        ["ID", page.id or ""],
        ["Brand", page.brand or ""],
        ["Images", "\n".join(page.image_urls)],
        ["Description", truncate(page.description or "", 200)],
    ]
    click.echo(tabulate(rows, tablefmt="grid"))


@cli.command()
@click.argument("query")
@click.pass_context
def narrow(ctx, query):
    """Show the longest prefix of QUERY the site search answers."""
    try:
        click.echo(get_scraper(ctx).narrow_query(query))
    except CLI_ERRORS as e:
        report_error(ctx, e)


@cli.command("filter")
@click.argument("source", type=click.Choice(["catalog", "search"]))
@click.argument("criteria")
@click.option(
    "--image",
    type=click.Choice(["present", "absent"]),
    help="Keep cards whose image is present/absent",
)
@click.option(
    "--description",
    type=click.Choice(["present", "absent"]),
    help="Keep cards whose description is present/absent",
)
@click.option(
    "--mode",
    type=click.Choice(["all", "any"]),
    default="all",
    help="Require all or any of the conditions (default: all)",
)
@click.option(
    "--data",
    type=click.Choice(["urls", "names", "basic-info"]),
    default="urls",
    help="What to output for each kept card (default: urls)",
)
@click.option(
    "--format-type",
    "-f",
    type=click.Choice(["text", "table", "csv"]),
    default="text",
    help="Output format (default: text)",
)
@click.option("--output", "-o", type=click.Path(), help="Save results to file")
@click.pass_context
def filter_cards(ctx, source, criteria, image, description, mode, data, format_type, output):
    """Filter product cards of a catalog section or of search results.

    CRITERIA is the catalog criteria (usually a brand) or the search query.
    For example, cards missing an image or a description:

        product-scraper filter catalog acme --image absent --description absent --mode any
    """
    try:
        scraper = get_scraper(ctx)
        predicate = build_predicate(image, description, mode)
        extractor = scraper.list_extractor(data)

        if source == "catalog":
            cards = scraper.filter_product_cards_from_catalog(criteria, extractor, predicate)
        else:
            cards = scraper.filter_product_cards_from_search(criteria, extractor, predicate)
    except CLI_ERRORS as e:
        report_error(ctx, e)
        return

    result_output = format_cards(cards, format_type)

    # Output to file or console
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(result_output)
        click.echo(f"Results written to {output}")
    else:
        click.echo(result_output)


def truncate(text, limit):
    return text if len(text) <= limit else text[: limit - 3] + "..."


def card_row(card):
    if isinstance(card, BasicInfo):
        return [card.name, card.brand or "", card.url or ""]
    return [card]


def format_cards(cards, format_type):
    """Format kept product cards based on specified format type."""
    if not cards:
        return "No product cards found."

    headers = ["Name", "Brand", "URL"] if isinstance(cards[0], BasicInfo) else ["Card"]
    rows = [card_row(card) for card in cards]

    if format_type == "text":
        lines = [f"Found {len(cards)} product cards:"]
        for i, row in enumerate(rows, 1):
            lines.append(f"{i}. " + " | ".join(value for value in row if value))
        return "\n".join(lines)

    elif format_type == "csv":
        import csv
        from io import StringIO

        output = StringIO()
        writer = csv.writer(output)
        writer.writerow(headers)
        writer.writerows(rows)
        return output.getvalue()

    else:  # table format
        table_data = [[truncate(value, 60) for value in row] for row in rows]
        return tabulate(table_data, headers=headers, tablefmt="grid")


if __name__ == "__main__":
    # This runs the Click application
    cli.main(obj={})
