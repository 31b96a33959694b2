"""Placeholder content used when the language model is unavailable."""

from __future__ import annotations

from recast.models import GeneratedContent, ReelScript, ReelSlide, ScrapedContent


def sample_content(scraped: ScrapedContent) -> GeneratedContent:
    title = scraped.title
    category = scraped.metadata.category or "concept"
    content = GeneratedContent(
        article_html=(
            "<article>"
            f"<h1>{title} (rewritten)</h1>"
            "<p>This is the rewritten article based on the original content.</p>"
            "<p>The content has been reworked and optimised for search while "
            "keeping the essence of the original.</p>"
            "<h2>Main section</h2>"
            "<p>Here we develop the key ideas of the article from a fresh angle.</p>"
            "</article>"
        ),
        image_prompt=(
            f"Professional image showing {category} related to {title}, "
            "modern photographic style"
        ),
        linkedin_post=(
            f"Great read on {title}!\n\n"
            "Recent research shows why this topic matters."
        ),
        twitter_thread=[
            f"THREAD: {title} - the essentials in 3 tweets",
            "1/ A key point about this topic.",
            "2/ A second important observation.",
            "3/ Conclusion and call to action.",
        ],
        instagram_reel_script=ReelScript(
            hook="Did you know 80% of people have never heard these facts?",
            slides=[
                ReelSlide(
                    subtitle="The problem",
                    visual="A confused person",
                    voiceover="Most people face this challenge without the right tools.",
                ),
                ReelSlide(
                    subtitle="The solution",
                    visual="An innovative idea",
                    voiceover="There is a much simpler way to solve it.",
                ),
            ],
        ),
    )
    content.fill_article_text()
    return content
