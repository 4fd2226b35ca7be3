from hypothesis import given, settings, strategies as st

from tex_fragmenter import fragmentize
from tex_fragmenter.config import DEFAULT_PIPELINE, PipelineSpec
from tex_fragmenter.framework import registry
from tex_fragmenter.language import INLINE_COMMAND_SIGNATURES
from tex_fragmenter.signatures import SignatureMatcher

TOKENS = [
    "text ",
    "Wort",
    "\n",
    "\n\n",
    "{",
    "}",
    "[",
    "]",
    "%",
    "\\\\",
    "\\selectlanguage{german}",
    "\\selectlanguage{klingon}",
    "\\usepackage[french]{babel}",
    "\\usepackage[main=english,ngerman]{babel}",
    "\\foreignlanguage{english}{",
    "\\foreignlanguage[x]{nope}{",
    "\\textfrench{",
    "\\begin{otherlanguage}{french}",
    "\\begin{otherlanguage*}{german}",
    "\\end{otherlanguage}",
    "\\begin{ngerman}",
    "\\end{ngerman}",
    "\\footnote{",
    "\\todo[inline]{",
    "% ltex: language=fr\n",
]

documents = st.lists(st.sampled_from(TOKENS), max_size=40).map("".join)

PARTITIONS = PipelineSpec(pipeline=[s for s in DEFAULT_PIPELINE if registry()[s].partitions])


@given(documents)
@settings(deadline=None)
def test_partition_passes_cover_document_exactly(doc: str) -> None:
    out = fragmentize(doc, spec=PARTITIONS)
    assert "".join(f.code for f in out) == doc
    assert out[0].from_pos == 0
    assert all(a.to_pos == b.from_pos for a, b in zip(out, out[1:]))
    assert all(f.code for f in out) or len(out) == 1


@given(documents)
@settings(deadline=None)
def test_every_fragment_is_a_slice_of_the_document(doc: str) -> None:
    out = fragmentize(doc)
    assert out
    assert all(doc[f.from_pos : f.to_pos] == f.code for f in out)


@given(documents)
@settings(deadline=None)
def test_overlay_passes_keep_partition_fragments(doc: str) -> None:
    pieces = fragmentize(doc, spec=PARTITIONS)
    out = fragmentize(doc)
    assert [f for f in out if f in pieces] == pieces


@given(documents)
@settings(deadline=None)
def test_matches_are_ordered_and_disjoint(doc: str) -> None:
    matches = SignatureMatcher(INLINE_COMMAND_SIGNATURES).find_all(doc)
    assert all(m.from_pos < m.to_pos <= len(doc) for m in matches)
    assert all(a.to_pos <= b.from_pos for a, b in zip(matches, matches[1:]))
