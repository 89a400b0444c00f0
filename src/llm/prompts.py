"""LLM prompts for recipe search and recipe formatting."""

FALLBACK_SENTENCE = "I don't have enough information about recipes."

RECIPE_SEARCH_PROMPT = """You are a helpful recipe assistant. Your task is to list the provided recipes in a very specific format.
Answer the user's question accurately based *only* on the provided recipe information. If the answer is not contained within the provided context, state that you don't have enough information about recipes, and do not attach any recipes in that case.

User's original query: "{query}"

Retrieved Recipe Information (Context):
{context}

Based *only* on the "Retrieved Recipe Information" provided above, generate a list of these recipes.

Your response must follow this EXACT format for each recipe:

Recipe X (Score: Y.YYYY): Recipe Title

Where X is the recipe number (starting from 1), Y.YYYY is the score to four decimal places, and Recipe Title is the exact title.

Additionally, remember:

Ensure the selections adhere to criteria: "{dietary_restrictions}; {cuisine_preferences} cuisine; {meal_type}".
If the query does not match any recipes, respond with "{fallback}" and do not include any recipes in the response.

Do NOT include any other text. Just provide the formatted list."""

RECIPE_FORMAT_PROMPT = """You are a structured recipe processor. You will be given raw recipe data in JSON format.
Return a cleaned and structured object.
Assume the recipe is intended for 2-4 servings.
Estimate prep time and nutrition facts per serving based on standard culinary data.
Return the final response strictly as a raw JSON object (no explanation, headers, code fences or formatting hints) with this shape:
{{
  "id": "string",
  "title": "string",
  "prepTimeMinutes": number,
  "servings": number,
  "ingredients": ["string", ...],
  "instructions": ["string", ...],
  "nutrition": {{
    "perServing": {{
      "calories": number,
      "totalFat": number,
      "saturatedFat": number,
      "carbohydrates": number,
      "sugar": number,
      "protein": number
    }}
  }}
}}

Field rules:
- "id" is the same as "_id" of the input.
- "prepTimeMinutes" is an estimate in minutes.
- "servings" is an estimate between 2 and 4.
- Keep ingredients exactly as they are, unless there is a formatting issue (e.g. fix "34 cup sugar" to "3/4 cup sugar").
- Make instructions clear, understandable sentences, as a numbered array of steps.
- All nutrition numbers are per-serving estimates, assuming the recipe is meant for 2-4 people.

Now process this recipe input:
{recipe_json}"""
