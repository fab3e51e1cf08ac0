"""Localized user-facing texts."""
from ..core.models.chat import MessageCatalog

EN = MessageCatalog(
    greeting_loaded=(
        "Hello! I'm your knowledge assistant. The knowledge base is loaded, "
        "ask away."
    ),
    greeting_empty=(
        "Hello! I'm your assistant. To get started, load a knowledge base "
        "first."
    ),
    knowledge_base_empty=(
        "The knowledge base is empty. Please load one before asking questions."
    ),
    no_relevant_content=(
        "I couldn't find anything relevant to your question in the knowledge base."
    ),
    missing_credential=(
        "The API_KEY environment variable is not set. Configure it in your "
        "environment or enter a key, then try again."
    ),
    invalid_credential=(
        "The API key is not valid or lacks the required permissions. Check the "
        "key and make sure the API is enabled for your project.\n\n"
        "Note: the stored key has been discarded, please enter it again."
    ),
    billing=(
        "There is a billing problem with your provider account. Make sure "
        "billing is enabled for the project that owns the API key."
    ),
    token_limit=(
        "The request exceeded the token limit. Try a shorter question or a "
        "smaller knowledge base."
    ),
    unknown="An unexpected error occurred. Please try again.\n\nDetails: {details}",
)

IT = MessageCatalog(
    greeting_loaded=(
        "Buongiorno! Sono il tuo assistente di conoscenza. La base di "
        "conoscenza è carica, fai pure le tue domande."
    ),
    greeting_empty=(
        "Buongiorno! Sono il tuo assistente. Per iniziare, carica una base di "
        "conoscenza."
    ),
    knowledge_base_empty=(
        "La base di conoscenza è vuota. Per favore, caricala prima di fare "
        "domande."
    ),
    no_relevant_content=(
        "Non ho trovato nulla di pertinente alla tua domanda nella base di "
        "conoscenza."
    ),
    missing_credential=(
        "La variabile d'ambiente API_KEY non è impostata. Configurala oppure "
        "inserisci una chiave, poi riprova."
    ),
    invalid_credential=(
        "La chiave API fornita non è valida o non ha i permessi necessari. "
        "Controlla la chiave e assicurati che l'API sia abilitata per il tuo "
        "progetto.\n\nNota: la chiave salvata è stata rimossa, inseriscila di nuovo."
    ),
    billing=(
        "Si è verificato un problema di fatturazione con il tuo account. "
        "Assicurati che la fatturazione sia abilitata per il progetto associato "
        "alla chiave API."
    ),
    token_limit=(
        "La richiesta ha superato il limite di token. Prova con una domanda più "
        "breve o una base di conoscenza più piccola."
    ),
    unknown="Si è verificato un errore inatteso. Riprova.\n\nDettagli: {details}",
)

CATALOGS = {"en": EN, "it": IT}


def get_catalog(locale: str) -> MessageCatalog:
    """Return the catalog for ``locale``, falling back to English."""
    return CATALOGS.get(locale.lower(), EN)
