import re
import textwrap

from bs4 import BeautifulSoup, Comment


class HTMLCleaner:
    BLOCK_TAGS = [
        'p', 'div', 'section', 'article', 'blockquote', 'li', 'ul', 'ol', 'table', 'tr',
        'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'pre', 'hr',
    ]

    def __init__(self, config=None):
        """
        Initializes the HTMLCleaner.
        Supported config keys: 'wordwrap' (line width, default 130; 0 disables wrapping).
        """
        self.config = config if config else {}
        self.wordwrap = self.config.get('wordwrap', 130)
        # Tags whose content never belongs in the plain text output
        self.default_tags_to_remove = ['script', 'style', 'link', 'meta', 'noscript', 'iframe', 'button', 'input', 'img', 'form']

    def to_plain_text(self, raw_html: str) -> str:
        """
        Converts an HTML fragment to plain text.
        Block elements are separated by blank lines, <br> becomes a line break,
        links keep only their text and images are dropped.
        """
        if not raw_html:
            return ""

        soup = BeautifulSoup(raw_html, 'html.parser')

        for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
            comment.extract()

        for tag_name in self.default_tags_to_remove:
            for tag in soup.find_all(tag_name):
                tag.decompose()

        # Collapse source formatting whitespace before inserting our own breaks
        for text_node in soup.find_all(string=True):
            if text_node.find_parent('pre') is None:
                text_node.replace_with(re.sub(r'\s+', ' ', str(text_node)))

        for br in soup.find_all('br'):
            br.replace_with('\n')

        for block in soup.find_all(self.BLOCK_TAGS):
            block.insert_before('\n\n')
            block.insert_after('\n\n')

        text = soup.get_text()
        lines = [self._wrap(line.strip()) for line in text.splitlines()]
        text = '\n'.join(lines)
        text = re.sub(r'\n{3,}', '\n\n', text)
        return text.strip()

    def _wrap(self, line: str) -> str:
        if not self.wordwrap or len(line) <= self.wordwrap:
            return line
        return textwrap.fill(line, width=self.wordwrap)
