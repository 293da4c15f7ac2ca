# studylens: turn slide decks and pdfs into bilingual study guides
