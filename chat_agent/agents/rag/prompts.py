"""
RAG Agent prompt templates
"""

from typing import List, Sequence

from chat_agent.models.domain import VectorMatch


RAG_SYSTEM_INSTRUCTIONS = """You are a helpful assistant that answers questions based on the provided documents.

IMPORTANT RULES:
- Use only the information from the documents to answer the user's question
- If the documents don't contain enough information to answer the question, say so clearly
- Always cite which source(s) you used for your answer (e.g., "According to Source 1...")
- If multiple sources conflict, mention both"""


NO_MATCH_ANSWER = "I couldn't find any relevant information in your documents to answer this question."
EMPTY_GENERATION_ANSWER = "Sorry, I could not generate a response."


def build_context(matches: Sequence[VectorMatch], max_chars: int) -> List[str]:
    """
    Format retrieved chunks as "[Source i from <file>]: <text>" lines.

    Lines are added in rank order until the next one would exceed max_chars;
    the first line is always kept, truncated if needed.
    """
    lines: List[str] = []
    used = 0
    for i, match in enumerate(matches, 1):
        file_name = match.metadata.get("fileName", "")
        text = str(match.metadata.get("text", ""))
        line = f"[Source {i} from {file_name}]: {text}"

        separator = 2 if lines else 0
        if used + separator + len(line) > max_chars:
            if not lines:
                lines.append(line[:max_chars])
            break
        lines.append(line)
        used += separator + len(line)

    return lines


def build_rag_prompt(query: str, context_lines: Sequence[str]) -> str:
    """User turn for answer generation."""
    context = "\n\n".join(context_lines)
    return f"""Based on the following documents, please answer this question: "{query}"

Documents:
{context}"""
